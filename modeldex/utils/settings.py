from dataclasses import dataclass

from PySide6.QtCore import QSettings, Signal

# Defaults for settings that are accessed from multiple places.
DEFAULT_SETTINGS = {
    # Directory or http(s) URL that asset paths are resolved against.
    'asset_root': '',
    # Prefix placed in front of `/glbs/...` when building asset paths.
    'asset_base_path': '',
    # Cache settings
    'asset_cache_max_size': 50,
    'asset_cache_sweep_interval_ms': 60000,
    'asset_loader_workers': 4,
    'asset_load_timeout_ms': 0,  # 0 = no timeout, a stalled load stays in Loading
    # Visibility
    'preload_margin_px': 300,
    'preload_exit_delay_ms': 1000,
    'strict_visibility_threshold': 0.1,
    # Quality / scroll budget
    'scroll_debounce_ms': 150,
    'interaction_release_ms': 1500,
    'scroll_budget_limit': 8,
    # Gallery host
    'gallery_item_count': 151,
    'trace_logs': False,
}


class Settings(QSettings):
    # Signal that shows that the setting with the given string was changes
    change = Signal(str, object, name='settingsChanged')

    def __init__(self):
        super().__init__('modeldex', 'modeldex')

    def setValue(self, key, value):
        super().setValue(key, value)
        self.change.emit(key, value)

# Common shared instance to ensure the Signal is also shared
settings = Settings()


@dataclass(frozen=True)
class ViewerConfig:
    """Resolved tuning values for the cache, trackers and schedulers."""

    asset_root: str = ''
    asset_base_path: str = ''
    cache_max_size: int = 50
    cache_sweep_interval_ms: int = 60000
    loader_workers: int = 4
    load_timeout_ms: int = 0
    preload_margin_px: int = 300
    preload_exit_delay_ms: int = 1000
    strict_visibility_threshold: float = 0.1
    scroll_debounce_ms: int = 150
    interaction_release_ms: int = 1500
    scroll_budget_limit: int = 8


def _read(source, key: str, value_type):
    return source.value(key, defaultValue=DEFAULT_SETTINGS[key], type=value_type)


def load_viewer_config(source=None) -> ViewerConfig:
    """Build a `ViewerConfig` from QSettings (or any object with `value`)."""
    source = settings if source is None else source
    return ViewerConfig(
        asset_root=_read(source, 'asset_root', str),
        asset_base_path=_read(source, 'asset_base_path', str),
        cache_max_size=max(1, _read(source, 'asset_cache_max_size', int)),
        cache_sweep_interval_ms=max(0, _read(source, 'asset_cache_sweep_interval_ms', int)),
        loader_workers=max(1, _read(source, 'asset_loader_workers', int)),
        load_timeout_ms=max(0, _read(source, 'asset_load_timeout_ms', int)),
        preload_margin_px=max(0, _read(source, 'preload_margin_px', int)),
        preload_exit_delay_ms=max(0, _read(source, 'preload_exit_delay_ms', int)),
        strict_visibility_threshold=min(1.0, max(0.0, _read(source, 'strict_visibility_threshold', float))),
        scroll_debounce_ms=max(0, _read(source, 'scroll_debounce_ms', int)),
        interaction_release_ms=max(0, _read(source, 'interaction_release_ms', int)),
        scroll_budget_limit=max(0, _read(source, 'scroll_budget_limit', int)),
    )
