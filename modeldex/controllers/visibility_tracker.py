"""Dual-zone viewport tracking: a wide preload zone and a strict visible zone."""

from dataclasses import dataclass
from typing import Callable, Protocol

from modeldex.models.viewer_state import ViewerInstanceState
from modeldex.utils.flow_log import log_flow
from modeldex.utils.timers import create_single_shot_timer

IntersectionCallback = Callable[[bool, float], None]


@dataclass(frozen=True)
class ObserveConfig:
    root_margin_px: int = 0  # grows the viewport vertically on both sides
    threshold: float = 0.0   # visible fraction of the element that counts as "in"


class ViewportObserver(Protocol):
    """Platform viewport/visibility primitive."""

    def observe(self, element, config: ObserveConfig, callback: IntersectionCallback): ...

    def unobserve(self, handle) -> None: ...


class VisibilityTracker:
    """Keeps `in_preload_zone` and `is_strictly_visible` current for one instance.

    Leaving the preload zone does not unload right away: a delay timer is
    started and the exit only takes effect if the element is still outside
    when it fires. Coming back first cancels the timer.
    """

    def __init__(self, state: ViewerInstanceState, observer: ViewportObserver, element, *,
                 preload_margin_px: int = 300, unload_delay_ms: int = 1000,
                 strict_threshold: float = 0.1, timer_factory=create_single_shot_timer,
                 on_preload_enter=None, on_preload_exit=None, on_visibility_changed=None):
        self._state = state
        self._observer = observer
        self._element = element
        self._preload_config = ObserveConfig(root_margin_px=preload_margin_px)
        self._strict_config = ObserveConfig(threshold=strict_threshold)
        self._on_preload_enter = on_preload_enter
        self._on_preload_exit = on_preload_exit
        self._on_visibility_changed = on_visibility_changed
        self._unload_timer = timer_factory(unload_delay_ms, self._on_unload_timer)
        self._preload_handle = None
        self._strict_handle = None
        self._preload_intersecting = False
        self._active = False

    @property
    def unload_pending(self) -> bool:
        return self._unload_timer.isActive()

    def start(self):
        if self._active:
            return
        self._active = True
        self._preload_intersecting = False
        self._preload_handle = self._observer.observe(
            self._element, self._preload_config, self._on_preload_intersection)
        self._strict_handle = self._observer.observe(
            self._element, self._strict_config, self._on_strict_intersection)

    def stop(self):
        """Unobserve both zones and cancel a pending unload."""
        self._active = False
        self._unload_timer.stop()
        if self._preload_handle is not None:
            self._observer.unobserve(self._preload_handle)
            self._preload_handle = None
        if self._strict_handle is not None:
            self._observer.unobserve(self._strict_handle)
            self._strict_handle = None

    def _on_preload_intersection(self, is_intersecting: bool, ratio: float):
        if not self._active:
            return
        self._preload_intersecting = is_intersecting
        if is_intersecting:
            if self._unload_timer.isActive():
                self._unload_timer.stop()
                log_flow("VISIBILITY", f"{self._state.instance_id}: re-entered preload zone, unload cancelled")
            if not self._state.in_preload_zone:
                self._state.in_preload_zone = True
                if self._on_preload_enter is not None:
                    self._on_preload_enter()
            return

        if self._state.in_preload_zone and not self._unload_timer.isActive():
            self._unload_timer.start()

    def _on_unload_timer(self):
        if not self._active or self._preload_intersecting:
            return
        if not self._state.in_preload_zone:
            return
        self._state.in_preload_zone = False
        log_flow("VISIBILITY", f"{self._state.instance_id}: left preload zone, releasing renderer")
        if self._on_preload_exit is not None:
            self._on_preload_exit()

    def _on_strict_intersection(self, is_intersecting: bool, ratio: float):
        if not self._active:
            return
        visible = bool(is_intersecting) and ratio >= self._strict_config.threshold
        if visible == self._state.is_strictly_visible:
            return
        self._state.is_strictly_visible = visible
        if self._on_visibility_changed is not None:
            self._on_visibility_changed()
