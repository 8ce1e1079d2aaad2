import faulthandler
import logging
import os
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .utils import get_user_data_path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_MAX_BYTES = 1_000_000
LOG_BACKUPS = 3

# libmpv log levels -> stdlib levels
MPV_LOG_LEVELS = {
    "fatal": logging.CRITICAL,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "v": logging.DEBUG,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}

_mpv_logger = logging.getLogger("mpv")
_fault_file = None


def _find_file_handler(root: logging.Logger, log_path: Path):
    target = os.path.abspath(log_path)
    for handler in root.handlers:
        if isinstance(handler, RotatingFileHandler) and getattr(handler, "baseFilename", "") == target:
            return handler
    return None


def setup_app_logging(log_path: Path | None = None, level: int = logging.INFO) -> Path:
    """Route the root logger to a rotating ``logs.txt``; safe to call again."""
    log_path = Path(log_path or get_user_data_path("logs.txt"))
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    if _find_file_handler(root, log_path) is not None:
        return log_path

    handler = RotatingFileHandler(
        log_path,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    logging.captureWarnings(True)
    _enable_fault_handler(log_path)
    _install_exception_hooks()
    logging.info(
        "Logging initialized: python=%s level=%s log_path=%s",
        sys.version.split()[0],
        logging.getLevelName(level),
        log_path,
    )
    return log_path


def mpv_log_handler(loglevel: str, component: str, message: str) -> None:
    """libmpv ``log_handler`` callback; runs on mpv's thread."""
    level = MPV_LOG_LEVELS.get(str(loglevel).lower(), logging.DEBUG)
    _mpv_logger.log(level, "[%s] %s", component, str(message).rstrip())


def _enable_fault_handler(log_path: Path) -> None:
    global _fault_file
    if _fault_file is not None:
        return
    try:
        _fault_file = open(log_path, "a", encoding="utf-8")
        faulthandler.enable(_fault_file)
    except OSError as e:
        _fault_file = None
        logging.warning("faulthandler unavailable: %s", e)


def _install_exception_hooks() -> None:
    def _on_exception(exc_type, exc_value, exc_tb):
        logging.critical("Unhandled exception", exc_info=(exc_type, exc_value, exc_tb))

    def _on_unraisable(unraisable):
        exc = unraisable.exc_value
        logging.critical(
            "Unraisable exception: %s",
            getattr(unraisable, "err_msg", None) or "",
            exc_info=(type(exc), exc, unraisable.exc_traceback),
        )

    def _on_thread_exception(args):
        logging.critical(
            "Unhandled exception in thread %s",
            getattr(args.thread, "name", "unknown"),
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )

    sys.excepthook = _on_exception
    sys.unraisablehook = _on_unraisable
    threading.excepthook = _on_thread_exception
