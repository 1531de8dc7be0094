from dataclasses import replace

from PySide6.QtCore import QObject, Signal

from modeldex.models.viewer_state import ScrollWindow
from modeldex.utils.flow_log import log_flow
from modeldex.utils.timers import create_single_shot_timer


class ScrollBudgetController(QObject):
    """Caps full-detail rendering to the first K visible items while scrolling."""

    window_changed = Signal(object)  # ScrollWindow

    def __init__(self, *, debounce_ms: int = 150, active_limit: int = 8,
                 timer_factory=create_single_shot_timer, parent=None):
        super().__init__(parent)
        self.active_limit = max(0, int(active_limit))
        self._window = ScrollWindow()
        self._settle_timer = timer_factory(debounce_ms, self._on_scroll_settled)

    @property
    def window(self) -> ScrollWindow:
        return self._window

    @property
    def is_scrolling(self) -> bool:
        return self._window.is_scrolling

    def notify_scroll(self):
        """Record a scroll event; scrolling ends after the debounce window."""
        self._settle_timer.stop()
        self._settle_timer.start()
        if not self._window.is_scrolling:
            self._set_window(replace(self._window, is_scrolling=True))

    def update_visible_range(self, start_index: int, end_index: int):
        start_index = max(0, int(start_index))
        end_index = int(end_index)
        if (start_index, end_index) == (self._window.start_index, self._window.end_index):
            return
        self._set_window(replace(self._window, start_index=start_index, end_index=end_index))

    def eligible_range(self) -> range:
        """Indices allowed to render at full detail right now (visible ones only)."""
        window = self._window
        if not window.is_scrolling:
            return range(window.start_index, window.end_index + 1)
        stop = min(window.end_index + 1, window.start_index + self.active_limit)
        return range(window.start_index, max(window.start_index, stop))

    def is_full_detail_eligible(self, index: int | None) -> bool:
        if not self._window.is_scrolling:
            return True
        if index is None:
            return False
        return index in self.eligible_range()

    def stop(self):
        self._settle_timer.stop()

    def _on_scroll_settled(self):
        if self._window.is_scrolling:
            self._set_window(replace(self._window, is_scrolling=False))

    def _set_window(self, window: ScrollWindow):
        self._window = window
        log_flow(
            "BUDGET",
            f"Window [{window.start_index}..{window.end_index}] scrolling={window.is_scrolling}",
            throttle_key="budget_window",
            every_s=0.25,
        )
        self.window_changed.emit(window)
