"""Load state machine with a single substitute-asset retry."""

from modeldex.models.asset_loader import AssetLoadError
from modeldex.models.viewer_state import LoadState, ViewerInstanceState
from modeldex.utils.asset_paths import FALLBACK_ASSET_PATH
from modeldex.utils.flow_log import log_flow
from modeldex.utils.timers import create_single_shot_timer


class FallbackController:
    """Drives one instance's loads: primary path, then at most one fallback.

    Every issued load captures the current generation. Completions from an
    older generation (after `release`, `invalidate` or a timeout) are dropped.
    """

    def __init__(self, state: ViewerInstanceState, loader, asset_path: str, *,
                 fallback_path: str = FALLBACK_ASSET_PATH, timeout_ms: int = 0,
                 timer_factory=create_single_shot_timer, on_change=None):
        self._state = state
        self._loader = loader
        self._asset_path = asset_path
        self._fallback_path = fallback_path
        self._on_change = on_change
        self._generation = 0
        self._attempts = 0
        self._scene = None
        self._timeout_timer = None
        if timeout_ms > 0:
            self._timeout_timer = timer_factory(timeout_ms, self._on_timeout)

    @property
    def scene(self):
        return self._scene

    @property
    def attempts(self) -> int:
        """Number of loads issued that were not served from the cache."""
        return self._attempts

    @property
    def current_path(self) -> str:
        return self._fallback_path if self._state.using_fallback else self._asset_path

    def ensure_loaded(self):
        """Start loading the current path unless already loading, loaded or failed."""
        if self._state.fallback_failed:
            return
        if self._state.load_state in (LoadState.LOADING, LoadState.LOADED):
            return
        self._issue(self.current_path)

    def release(self):
        """Drop the scene and ignore in-flight results; fallback flags persist."""
        self._generation += 1
        self._stop_timeout()
        self._scene = None
        if not self._state.fallback_failed:
            self._state.load_state = LoadState.IDLE
        self._notify()

    def invalidate(self):
        """Discard every pending completion. Used when the instance unmounts."""
        self._generation += 1
        self._stop_timeout()

    def reset(self):
        """Forget the scene and attempt count, discarding pending completions."""
        self.invalidate()
        self._scene = None
        self._attempts = 0

    def fail_current(self, error: Exception):
        """Treat the in-flight load as failed (e.g. it timed out)."""
        if self._state.load_state is not LoadState.LOADING:
            return
        self._generation += 1
        self._handle_failure(self.current_path, error)

    def _issue(self, path: str):
        self._generation += 1
        generation = self._generation
        self._state.load_state = LoadState.LOADING
        self._notify()
        from_cache = self._loader.request(
            path,
            lambda p, scene: self._on_loaded(generation, p, scene),
            lambda p, error: self._on_failed(generation, p, error),
        )
        if from_cache:
            return
        self._attempts += 1
        if self._generation == generation and self._state.load_state is LoadState.LOADING:
            self._start_timeout()

    def _on_loaded(self, generation: int, path: str, scene):
        if generation != self._generation:
            return
        self._stop_timeout()
        self._scene = scene
        self._state.load_state = LoadState.LOADED
        self._notify()

    def _on_failed(self, generation: int, path: str, error):
        if generation != self._generation:
            return
        self._handle_failure(path, error)

    def _handle_failure(self, path: str, error):
        self._stop_timeout()
        self._scene = None
        if not self._state.using_fallback:
            log_flow("FALLBACK", f"Error loading model {path}, using fallback: {error}", level="WARN")
            self._state.using_fallback = True
            self._state.load_state = LoadState.ERROR
            self._issue(self._fallback_path)
            return

        log_flow("FALLBACK", f"Fallback model also failed to load ({path}): {error}", level="ERROR")
        self._state.load_state = LoadState.ERROR
        self._state.fallback_failed = True
        self._notify()

    def _on_timeout(self):
        if self._state.load_state is not LoadState.LOADING:
            return
        self.fail_current(AssetLoadError(self.current_path, "load timed out"))

    def _start_timeout(self):
        if self._timeout_timer is not None:
            self._timeout_timer.stop()
            self._timeout_timer.start()

    def _stop_timeout(self):
        if self._timeout_timer is not None:
            self._timeout_timer.stop()

    def _notify(self):
        if self._on_change is not None:
            self._on_change()
