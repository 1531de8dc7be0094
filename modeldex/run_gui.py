import logging
import os
import sys
import threading
import traceback
import warnings
from datetime import datetime

from PySide6.QtWidgets import QApplication, QMainWindow

from modeldex.models.asset_cache import AssetCache
from modeldex.models.asset_loader import AssetLoader
from modeldex.utils.settings import DEFAULT_SETTINGS, load_viewer_config, settings
from modeldex.widgets.model_gallery import ModelGallery, build_gallery_entries

CRASH_LOG_PATH = os.path.abspath('modeldex_crash.log')


def _append_crash_log(title: str, exc_info=None):
    """Append a timestamped crash entry to the crash log."""
    ts = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
    try:
        with open(CRASH_LOG_PATH, 'a', encoding='utf-8') as f:
            f.write("\n" + "=" * 80 + "\n")
            f.write(f"{ts} | {title}\n")
            f.write("=" * 80 + "\n")
            if exc_info is None:
                f.write(traceback.format_exc())
            else:
                f.writelines(traceback.format_exception(*exc_info))
            f.write("\n")
    except Exception as log_error:
        print(f"[CRASH] Failed to write crash log: {log_error}")
    print(f"[CRASH] Details written to: {CRASH_LOG_PATH}")


def install_crash_handlers():
    """Log unhandled exceptions from the UI thread and loader threads."""
    def _unhandled_exception(exc_type, exc_value, exc_traceback):
        _append_crash_log("UNHANDLED EXCEPTION", (exc_type, exc_value, exc_traceback))
        sys.__excepthook__(exc_type, exc_value, exc_traceback)

    def _thread_exception(args):
        thread_name = getattr(args.thread, 'name', 'unknown')
        _append_crash_log(
            f"THREAD EXCEPTION ({thread_name})",
            (args.exc_type, args.exc_value, args.exc_traceback),
        )

    sys.excepthook = _unhandled_exception
    threading.excepthook = _thread_exception


def suppress_warnings():
    """Suppress library warnings when not in a development environment."""
    if os.getenv('MODELDEX_ENVIRONMENT') == 'development':
        print('Running in development environment.')
        return
    logging.getLogger('trimesh').setLevel(logging.ERROR)
    logging.basicConfig(level=logging.ERROR)
    warnings.simplefilter('ignore')


def run_gui():
    install_crash_handlers()
    app = QApplication(sys.argv)
    app.setApplicationName('modeldex')
    app.setApplicationDisplayName('modeldex')
    app.setStyle('Fusion')

    config = load_viewer_config()
    # The cache is created here, once, and handed to the loader.
    cache = AssetCache(
        max_size=config.cache_max_size,
        sweep_interval_ms=config.cache_sweep_interval_ms,
    )
    cache.start_sweep()
    loader = AssetLoader(
        cache,
        config.asset_root,
        max_workers=config.loader_workers,
        timeout_s=config.load_timeout_ms / 1000 if config.load_timeout_ms > 0 else None,
    )

    count = settings.value('gallery_item_count',
                           defaultValue=DEFAULT_SETTINGS['gallery_item_count'], type=int)
    entries = build_gallery_entries(count, config.asset_base_path)

    window = QMainWindow()
    gallery = ModelGallery(entries, loader, config)
    window.setCentralWidget(gallery)
    window.resize(480, 800)
    window.show()

    def _shutdown():
        print("[SHUTDOWN] Stopping viewers and loader...")
        gallery.shutdown()
        cache.stop_sweep()
        loader.shutdown()

    app.aboutToQuit.connect(_shutdown)
    return int(app.exec())


def main():
    suppress_warnings()
    sys.exit(run_gui())


if __name__ == '__main__':
    main()
