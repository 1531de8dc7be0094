"""Timestamped console tracing shared by the cache, loader and controllers."""

import time

from modeldex.utils.settings import DEFAULT_SETTINGS, settings

_flow_log_last: dict[str, float] = {}


def _trace_enabled() -> bool:
    return bool(settings.value('trace_logs', DEFAULT_SETTINGS['trace_logs'], type=bool))


def log_flow(component: str, message: str, *, level: str = "DEBUG",
             throttle_key: str | None = None, every_s: float | None = None):
    """Timestamped, optionally throttled flow logging.

    DEBUG lines are only printed when the `trace_logs` setting is on.
    WARN and ERROR lines are always printed.
    """
    if level == "DEBUG" and not _trace_enabled():
        return

    now = time.time()
    if throttle_key and every_s is not None:
        last = _flow_log_last.get(throttle_key, 0.0)
        if (now - last) < every_s:
            return
        _flow_log_last[throttle_key] = now
    ts = time.strftime("%H:%M:%S", time.localtime(now)) + f".{int((now % 1) * 1000):03d}"
    print(f"[{ts}][TRACE][{component}][{level}] {message}")
