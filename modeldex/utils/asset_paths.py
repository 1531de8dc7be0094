"""Asset path conventions: `{base}/glbs/{0000}[-{variant}].glb`."""

FALLBACK_ASSET_ID = 0

# Species with separate male/female models.
ASSET_VARIANTS: dict[str, tuple[str, ...]] = {
    '0521': ('M', 'F'),
    '0668': ('M', 'F'),
    '0916': ('M', 'F'),
}


def format_asset_id(asset_id) -> str:
    """Zero-pad a numeric id to four digits (`25` -> `0025`)."""
    return f"{int(asset_id):04d}"


def build_asset_path(asset_id, variant: str | None = None, base: str = '') -> str:
    stem = format_asset_id(asset_id)
    if variant:
        stem = f"{stem}-{variant}"
    return f"{base.rstrip('/')}/glbs/{stem}.glb"


def fallback_asset_path(base: str = '') -> str:
    return build_asset_path(FALLBACK_ASSET_ID, base=base)


FALLBACK_ASSET_PATH = fallback_asset_path()


def asset_paths_for(asset_id, base: str = '') -> list[tuple[str, str | None]]:
    """Return `(path, variant)` pairs for an id, expanding known variants."""
    variants = ASSET_VARIANTS.get(format_asset_id(asset_id))
    if not variants:
        return [(build_asset_path(asset_id, base=base), None)]
    return [(build_asset_path(asset_id, variant, base=base), variant) for variant in variants]


def normalize_asset_path(path: str) -> str:
    """Strip leading separators so the path resolves relative to the asset root."""
    return str(path).lstrip('/\\')
