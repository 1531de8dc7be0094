"""Lighting and background colors selected from an asset's type tags."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class TypeLighting:
    main_light: str
    intensity: float
    ambient_color: str
    ambient_intensity: float
    background_color: str
    secondary_color: str  # second gradient color


TYPE_LIGHTING: dict[str, TypeLighting] = {
    'normal': TypeLighting('#a8a878', 1.0, '#d9d9d9', 0.3, '#A8A878', '#C6C6A7'),
    'fire': TypeLighting('#ff9248', 1.3, '#3a1f00', 0.4, '#F08030', '#FD7D24'),
    'water': TypeLighting('#90e0ef', 0.9, '#0077b6', 0.3, '#6890F0', '#5CC1E3'),
    'electric': TypeLighting('#ffee32', 1.2, '#fcbf49', 0.5, '#F8D030', '#FAE078'),
    'grass': TypeLighting('#80b918', 1.0, '#1b4332', 0.35, '#78C850', '#A7DB8D'),
    'ice': TypeLighting('#caf0f8', 0.8, '#a8dadc', 0.4, '#98D8D8', '#BCE6E6'),
    'fighting': TypeLighting('#e76f51', 1.1, '#bc6c25', 0.35, '#C03028', '#D67873'),
    'poison': TypeLighting('#c77dff', 0.9, '#7b2cbf', 0.4, '#A040A0', '#C183C1'),
    'ground': TypeLighting('#ddbea9', 1.05, '#6b705c', 0.3, '#E0C068', '#EBD69D'),
    'flying': TypeLighting('#ade8f4', 1.0, '#90e0ef', 0.4, '#A890F0', '#C6B7F5'),
    'psychic': TypeLighting('#ff70a6', 1.0, '#ff9770', 0.3, '#F85888', '#FA92B2'),
    'bug': TypeLighting('#d8f3dc', 1.0, '#606c38', 0.35, '#A8B820', '#C6D16E'),
    'rock': TypeLighting('#ced4da', 1.1, '#6c584c', 0.25, '#B8A038', '#D1C17D'),
    'ghost': TypeLighting('#7400b8', 0.7, '#5e60ce', 0.3, '#705898', '#A292BC'),
    'dragon': TypeLighting('#5e60ce', 1.1, '#240046', 0.3, '#7038F8', '#8C6FF1'),
    'dark': TypeLighting('#343a40', 0.7, '#212529', 0.2, '#705848', '#A29288'),
    'steel': TypeLighting('#dee2e6', 1.2, '#6c757d', 0.3, '#B8B8D0', '#D1D1E0'),
    'fairy': TypeLighting('#ffc8dd', 0.9, '#ffafcc', 0.4, '#EE99AC', '#F4BDC9'),
}

PRIMARY_WEIGHT = 0.7


def _hex_to_rgb(color: str) -> tuple[int, int, int]:
    value = color.lstrip('#')
    if len(value) == 3:
        value = ''.join(ch * 2 for ch in value)
    try:
        return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)
    except ValueError:
        return 0, 0, 0


def _rgb_to_hex(r: int, g: int, b: int) -> str:
    return f"#{r:02x}{g:02x}{b:02x}"


def blend_colors(color1: str, color2: str, ratio: float = PRIMARY_WEIGHT) -> str:
    """Mix two hex colors, `ratio` of the first and the rest of the second."""
    rgb1 = _hex_to_rgb(color1)
    rgb2 = _hex_to_rgb(color2)
    mixed = (round(a * ratio + b * (1 - ratio)) for a, b in zip(rgb1, rgb2))
    return _rgb_to_hex(*mixed)


def lighten_color(color: str, amount: float) -> str:
    """Move each channel `amount` of the way towards white."""
    lightened = (min(255, round(c + (255 - c) * amount)) for c in _hex_to_rgb(color))
    return _rgb_to_hex(*lightened)


def lighting_for_type(type_tag: str | None) -> TypeLighting:
    return TYPE_LIGHTING.get((type_tag or '').strip().lower(), TYPE_LIGHTING['normal'])


def get_type_lighting(types, blend: bool = False) -> TypeLighting:
    """Lighting for the primary type, or a 70/30 blend of the first two."""
    types = [t for t in (types or []) if t]
    if not types:
        return TYPE_LIGHTING['normal']
    primary = lighting_for_type(types[0])
    if len(types) == 1 or not blend:
        return primary

    secondary = lighting_for_type(types[1])
    return replace(
        primary,
        main_light=blend_colors(primary.main_light, secondary.main_light),
        intensity=primary.intensity * PRIMARY_WEIGHT + secondary.intensity * (1 - PRIMARY_WEIGHT),
        ambient_color=blend_colors(primary.ambient_color, secondary.ambient_color),
        ambient_intensity=(primary.ambient_intensity * PRIMARY_WEIGHT
                           + secondary.ambient_intensity * (1 - PRIMARY_WEIGHT)),
        background_color=blend_colors(primary.background_color, secondary.background_color),
        secondary_color=blend_colors(primary.secondary_color, secondary.secondary_color),
    )


def type_background_stops(types, soft: bool = False) -> list[tuple[float, str]]:
    """Gradient stops `(position, color)` for a card background.

    One type gives a two-color gradient; two types split the gradient
    between both types' colors. `soft` lightens the colors so they do not
    compete with the model.
    """
    types = [t for t in (types or []) if t] or ['normal']
    primary = lighting_for_type(types[0])

    def _c(color: str, amount: float) -> str:
        return lighten_color(color, amount) if soft else color

    if len(types) == 1:
        return [
            (0.0, _c(primary.background_color, 0.3)),
            (1.0, _c(primary.secondary_color, 0.4)),
        ]

    secondary = lighting_for_type(types[1])
    return [
        (0.0, _c(primary.background_color, 0.25)),
        (0.45, _c(primary.secondary_color, 0.4)),
        (0.55, _c(secondary.background_color, 0.25)),
        (1.0, _c(secondary.secondary_color, 0.4)),
    ]
