"""In-memory cache of decoded scene graphs shared by every viewer instance."""

import threading
from collections import OrderedDict

from modeldex.utils.flow_log import log_flow
from modeldex.utils.timers import create_repeating_timer


class AssetCache:
    """Bounded path -> scene cache with strict FIFO eviction.

    Eviction order is insertion order, independent of how recently an entry
    was read. Re-inserting a key replaces its value but keeps its position.
    """

    def __init__(self, max_size: int = 50, sweep_interval_ms: int = 60000,
                 timer_factory=create_repeating_timer):
        self._entries: OrderedDict[str, object] = OrderedDict()
        self._lock = threading.Lock()
        self._max_size = max(1, int(max_size))
        self._sweep_interval_ms = int(sweep_interval_ms)
        self._timer_factory = timer_factory
        self._sweep_timer = None

    @property
    def max_size(self) -> int:
        return self._max_size

    def set_max_size(self, max_size: int):
        """Change capacity; takes effect on the next eviction pass."""
        self._max_size = max(1, int(max_size))

    def get(self, path: str):
        with self._lock:
            return self._entries.get(path)

    def put(self, path: str, scene):
        """Insert a decoded scene (last write wins), then trim to capacity."""
        with self._lock:
            self._entries[path] = scene
        self.evict_if_over_capacity()

    def evict_if_over_capacity(self, max_size: int | None = None) -> list[str]:
        """Remove the oldest entries until the cache fits. Returns evicted keys."""
        limit = self._max_size if max_size is None else max(0, int(max_size))
        evicted = []
        with self._lock:
            while len(self._entries) > limit:
                key, _scene = self._entries.popitem(last=False)
                evicted.append(key)
        if evicted:
            log_flow("CACHE", f"Evicted {len(evicted)} entries (size={len(self)}, max={limit})")
        return evicted

    def start_sweep(self):
        """Run an eviction pass every sweep interval, independent of `put`."""
        if self._sweep_interval_ms <= 0:
            return
        if self._sweep_timer is None:
            self._sweep_timer = self._timer_factory(self._sweep_interval_ms, self._on_sweep)
        if not self._sweep_timer.isActive():
            self._sweep_timer.start()

    def stop_sweep(self):
        if self._sweep_timer is not None:
            self._sweep_timer.stop()

    def _on_sweep(self):
        self.evict_if_over_capacity()

    def clear(self):
        with self._lock:
            self._entries.clear()

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries.keys())

    def __contains__(self, path) -> bool:
        with self._lock:
            return path in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
