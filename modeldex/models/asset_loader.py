"""Fetch and decode GLB assets off the UI thread, backed by `AssetCache`."""

import io
import itertools
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from urllib.parse import urljoin

import requests
import trimesh
from PySide6.QtCore import QObject, Signal, Slot

from modeldex.models.asset_cache import AssetCache
from modeldex.utils.asset_paths import normalize_asset_path
from modeldex.utils.flow_log import log_flow


class AssetLoadError(Exception):
    """Fetching or decoding an asset failed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def fetch_asset_bytes(location: str, timeout_s: float | None = None) -> bytes:
    """Read raw asset bytes from an http(s) URL or a local file."""
    if location.startswith(('http://', 'https://')):
        response = requests.get(location, timeout=timeout_s)
        response.raise_for_status()
        return response.content
    return Path(location).read_bytes()


def decode_scene(data: bytes, file_type: str = 'glb'):
    """Decode GLB bytes into a `trimesh.Scene`."""
    return trimesh.load(io.BytesIO(data), file_type=file_type, force='scene')


class AssetLoader(QObject):
    """Loads assets on a worker pool and reports back on the owning thread.

    Worker threads never touch the cache. Results are emitted through a
    signal, which Qt queues onto the loader's thread, and only there is the
    cache updated and the requester notified.
    """

    _load_finished = Signal(int, str, object, object)  # request_id, path, scene, error

    def __init__(self, cache: AssetCache, asset_root: str = '', *, executor=None,
                 max_workers: int = 4, timeout_s: float | None = None,
                 fetcher=fetch_asset_bytes, decoder=decode_scene, parent=None):
        super().__init__(parent)
        self._cache = cache
        self._asset_root = asset_root or ''
        self._executor = executor or ThreadPoolExecutor(max_workers=max_workers,
                                                        thread_name_prefix="asset_load")
        self._timeout_s = timeout_s
        self._fetcher = fetcher
        self._decoder = decoder
        self._request_ids = itertools.count(1)
        self._callbacks: dict[int, tuple] = {}
        self._load_finished.connect(self._on_load_finished)

    @property
    def cache(self) -> AssetCache:
        return self._cache

    @property
    def pending_count(self) -> int:
        return len(self._callbacks)

    def resolve(self, path: str) -> str:
        """Map an asset path to the location that is actually fetched."""
        relative = normalize_asset_path(path)
        root = self._asset_root
        if not root:
            return relative
        if root.startswith(('http://', 'https://')):
            return urljoin(root.rstrip('/') + '/', relative)
        return str(Path(root) / relative)

    def request(self, path: str, on_loaded, on_failed) -> bool:
        """Load `path`, calling `on_loaded(path, scene)` or `on_failed(path, error)`.

        Returns True when the scene was already cached; `on_loaded` has then
        been called synchronously and nothing is fetched.
        """
        scene = self._cache.get(path)
        if scene is not None:
            log_flow("LOADER", f"Cache hit: {path}", throttle_key="loader_hit", every_s=0.5)
            on_loaded(path, scene)
            return True

        request_id = next(self._request_ids)
        self._callbacks[request_id] = (on_loaded, on_failed)
        try:
            future = self._executor.submit(self._fetch_and_decode, path)
        except RuntimeError as e:
            # Executor already shut down.
            self._callbacks.pop(request_id, None)
            error = AssetLoadError(path, f"loader unavailable: {e}")
            log_flow("LOADER", str(error), level="ERROR")
            on_failed(path, error)
            return False

        future.add_done_callback(
            lambda f, rid=request_id, p=path: self._deliver(rid, p, f)
        )
        return False

    def _fetch_and_decode(self, path: str):
        location = self.resolve(path)
        data = self._fetcher(location, self._timeout_s)
        return self._decoder(data)

    def _deliver(self, request_id: int, path: str, future):
        """Runs on the worker thread; hands the outcome to the loader's thread."""
        if future.cancelled():
            self._load_finished.emit(request_id, path, None, AssetLoadError(path, "cancelled"))
            return
        error = future.exception()
        if error is not None:
            self._load_finished.emit(request_id, path, None, error)
            return
        scene = future.result()
        if scene is None:
            self._load_finished.emit(request_id, path, None, AssetLoadError(path, "decoder returned nothing"))
            return
        self._load_finished.emit(request_id, path, scene, None)

    @Slot(int, str, object, object)
    def _on_load_finished(self, request_id: int, path: str, scene, error):
        callbacks = self._callbacks.pop(request_id, None)
        if error is not None:
            if not isinstance(error, AssetLoadError):
                error = AssetLoadError(path, f"{type(error).__name__}: {error}")
            log_flow("LOADER", f"Failed to load {path}: {error.reason}", level="ERROR")
            if callbacks is not None:
                callbacks[1](path, error)
            return

        self._cache.put(path, scene)
        log_flow("LOADER", f"Loaded {path} (cache size={len(self._cache)})")
        if callbacks is not None:
            callbacks[0](path, scene)

    def shutdown(self):
        """Stop accepting work and drop queued loads."""
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._callbacks.clear()
