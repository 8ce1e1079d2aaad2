import logging
import os
import shutil
import sys
import threading

from PySide6.QtWidgets import QApplication

from .app_logging import setup_app_logging
from .i18n import setup_i18n
from .settings import load_log_level


def _log_runtime_tool_diagnostics() -> None:
    try:
        import yt_dlp as _yt_dlp

        py_yt_dlp = getattr(_yt_dlp.version, "__version__", "unknown")
    except Exception as e:
        py_yt_dlp = f"unavailable ({e})"
    logging.info("Runtime yt-dlp (python package)=%s", py_yt_dlp)
    logging.info("Resolved executables: yt-dlp=%s", shutil.which("yt-dlp") or "not found")


def run() -> int:
    setup_app_logging(level=load_log_level())
    _log_runtime_tool_diagnostics()
    setup_i18n()

    app = QApplication(sys.argv)
    app.setApplicationName("Music Finder")
    app.setQuitOnLastWindowClosed(True)

    # Deferred: importing mpv needs libmpv on the loader path.
    from .player_window import MusicFinderWindow

    window = MusicFinderWindow()

    def _quit_watchdog() -> None:
        killer = threading.Timer(3.0, lambda: os._exit(0))
        killer.daemon = True
        killer.start()

    app.aboutToQuit.connect(_quit_watchdog)

    window.show()
    exit_code = app.exec()
    logging.info("Event loop finished: exit_code=%s", exit_code)
    return int(exit_code)

