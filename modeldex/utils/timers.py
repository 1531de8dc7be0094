"""QTimer factories used for debounce, hysteresis and sweep handles.

Controllers receive one of these factories so a handle can be stopped on
re-trigger or unmount. Any object with `start()`, `stop()` and `isActive()`
can stand in for the returned QTimer.
"""

from PySide6.QtCore import QTimer


def create_single_shot_timer(interval_ms: int, callback, parent=None) -> QTimer:
    timer = QTimer(parent)
    timer.setSingleShot(True)
    timer.setInterval(int(interval_ms))
    timer.timeout.connect(callback)
    return timer


def create_repeating_timer(interval_ms: int, callback, parent=None) -> QTimer:
    timer = QTimer(parent)
    timer.setSingleShot(False)
    timer.setInterval(int(interval_ms))
    timer.timeout.connect(callback)
    return timer
