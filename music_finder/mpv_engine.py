import logging

import mpv

from PySide6.QtCore import QObject, Qt, Signal

from .app_logging import mpv_log_handler
from .engine import (
    EngineOptions,
    PlaybackEngine,
    STATE_ENDED,
    STATE_ERROR,
    STATE_PAUSED,
    STATE_PLAYING,
    STATE_UNSTARTED,
)
from .utils import watch_url

# mpv_end_file_reason values
END_FILE_REASON_EOF = 0
END_FILE_REASON_ERROR = 4
UNKNOWN_ERROR_CODE = -1


def _event_name(event) -> str:
    # Avoid event.as_dict(); it has been unstable with rapid track changes.
    name = None
    event_id = getattr(event, "event_id", None)
    if event_id is not None and hasattr(event_id, "name"):
        name = event_id.name
    elif hasattr(event, "name"):
        name = event.name
    if isinstance(name, bytes):
        name = name.decode(errors="ignore")
    return str(name or "").lower().replace("_", "-")


def _end_file_details(event) -> tuple[int | None, int]:
    data = getattr(event, "data", None)
    reason = getattr(data, "reason", None)
    error = getattr(data, "error", None)
    try:
        reason = int(reason) if reason is not None else None
    except (TypeError, ValueError):
        reason = None
    try:
        error = int(error) if error is not None else UNKNOWN_ERROR_CODE
    except (TypeError, ValueError):
        error = UNKNOWN_ERROR_CODE
    return reason, error


class MpvEngine(QObject, PlaybackEngine):
    """libmpv-backed engine streaming YouTube ids through mpv's ytdl hook.

    mpv calls back on its own event thread; everything is re-emitted through
    queued signals so listeners always run on the Qt main thread.
    """

    _mpv_event_signal = Signal(str, int, int)
    _mpv_property_signal = Signal(str, bool)

    def __init__(self, wid=None, options: EngineOptions | None = None, parent=None):
        QObject.__init__(self, parent)
        PlaybackEngine.__init__(self, options)
        self._state = STATE_UNSTARTED
        self._file_started = False
        self._file_loaded = False
        self._eof = False

        mpv_opts = {
            "osc": self.options.show_native_controls,
            "input_default_bindings": self.options.keyboard_shortcuts,
            "input_vo_keyboard": self.options.keyboard_shortcuts,
            "ytdl": True,
            "idle": True,
            "keep_open": True,
            "hr_seek": "yes",
            "referrer": self.options.origin,
        }
        if wid is not None:
            mpv_opts["wid"] = str(int(wid))
        self.player = mpv.MPV(log_handler=mpv_log_handler, loglevel="warn", **mpv_opts)
        # Start in "Ready" state, never playing on initial load.
        self.player.pause = not self.options.autoplay
        logging.info("mpv engine created: options=%s", self.options)

        self._mpv_event_signal.connect(self._process_mpv_event_on_main_thread, Qt.QueuedConnection)
        self._mpv_property_signal.connect(self._process_property_on_main_thread, Qt.QueuedConnection)
        self.player.register_event_callback(self._on_mpv_event)
        self.player.observe_property("pause", self._on_mpv_property)
        self.player.observe_property("eof-reached", self._on_mpv_property)

    # mpv event thread
    def _on_mpv_event(self, event):
        try:
            name = _event_name(event)
            if name not in {"start-file", "file-loaded", "end-file"}:
                return
            reason, error = _end_file_details(event) if name == "end-file" else (None, 0)
            self._mpv_event_signal.emit(name, -1 if reason is None else reason, error)
        except Exception as e:
            logging.debug("mpv event callback failed: %s", e)

    def _on_mpv_property(self, name, value):
        self._mpv_property_signal.emit(str(name), bool(value))

    # main thread
    def _process_mpv_event_on_main_thread(self, name: str, reason: int, error: int):
        if name == "start-file":
            self._file_started = True
            self._file_loaded = False
            self._eof = False
            self._set_state(STATE_UNSTARTED)
        elif name == "file-loaded":
            self._file_loaded = True
            if not self.player.pause:
                self._set_state(STATE_PLAYING)
        elif name == "end-file":
            failed = reason == END_FILE_REASON_ERROR or (
                reason < 0 and self._file_started and not self._file_loaded
            )
            self._file_started = False
            self._file_loaded = False
            if failed:
                logging.warning("mpv could not play file: error=%s", error)
                self._set_state(STATE_ERROR)
                self.emit_error(error)
            elif reason == END_FILE_REASON_EOF:
                self._set_state(STATE_ENDED)

    def _process_property_on_main_thread(self, name: str, value: bool):
        if name == "eof-reached":
            self._eof = value
            if value:
                self._set_state(STATE_ENDED)
        elif name == "pause":
            if self._eof or not self._file_loaded:
                return
            self._set_state(STATE_PAUSED if value else STATE_PLAYING)

    def _set_state(self, state: str):
        if state == self._state and state not in {STATE_ENDED, STATE_ERROR}:
            return
        self._state = state
        self.emit_state(state)

    # commands
    def load(self, track_id: str) -> None:
        self.player.pause = True
        self._eof = False
        self.player.command("loadfile", watch_url(track_id), "replace")

    def play(self) -> None:
        try:
            if self._eof:
                self.player.command("seek", 0, "absolute")
                self._eof = False
            self.player.pause = False
        except Exception as e:
            logging.debug("mpv play failed: %s", e)

    def pause(self) -> None:
        try:
            self.player.pause = True
        except Exception as e:
            logging.debug("mpv pause failed: %s", e)

    def seek_to(self, seconds: float) -> None:
        try:
            self.player.command("seek", max(0.0, float(seconds)), "absolute")
        except Exception as e:
            # Transient while mpv is switching files.
            logging.debug("mpv seek failed: %s", e)

    def set_volume(self, level: int) -> None:
        try:
            self.player.volume = int(level)
        except Exception as e:
            logging.debug("mpv volume failed: %s", e)

    def get_current_time(self) -> float:
        try:
            return float(self.player.time_pos or 0.0)
        except Exception:
            return 0.0

    def get_duration(self) -> float:
        try:
            return float(self.player.duration or 0.0)
        except Exception:
            return 0.0

    def get_state(self) -> str:
        return self._state

    def shutdown(self) -> None:
        try:
            self.player.command("stop")
        except Exception as e:
            logging.debug("mpv stop skipped: %s", e)
        self.player.terminate()
