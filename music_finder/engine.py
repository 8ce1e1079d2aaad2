"""Contract between the playback controller and the external video player."""

from dataclasses import dataclass
from typing import Callable

STATE_UNSTARTED = "unstarted"
STATE_PLAYING = "playing"
STATE_PAUSED = "paused"
STATE_ENDED = "ended"
STATE_ERROR = "error"

StateListener = Callable[[str], None]
ErrorListener = Callable[[int], None]


@dataclass(frozen=True)
class EngineOptions:
    """Start-up options the controller hands to the engine."""

    show_native_controls: bool = False
    keyboard_shortcuts: bool = False
    autoplay: bool = False
    origin: str = "https://www.youtube.com"


class PlaybackEngine:
    """Base class for engines. Subclasses deliver events through the listeners."""

    def __init__(self, options: EngineOptions | None = None):
        self.options = options or EngineOptions()
        self._on_state_change: StateListener | None = None
        self._on_error: ErrorListener | None = None

    def set_listeners(self, on_state_change: StateListener, on_error: ErrorListener) -> None:
        self._on_state_change = on_state_change
        self._on_error = on_error

    def emit_state(self, state: str) -> None:
        if self._on_state_change:
            self._on_state_change(state)

    def emit_error(self, code: int) -> None:
        if self._on_error:
            self._on_error(code)

    def load(self, track_id: str) -> None:
        raise NotImplementedError

    def play(self) -> None:
        raise NotImplementedError

    def pause(self) -> None:
        raise NotImplementedError

    def seek_to(self, seconds: float) -> None:
        raise NotImplementedError

    def set_volume(self, level: int) -> None:
        raise NotImplementedError

    def get_current_time(self) -> float:
        raise NotImplementedError

    def get_duration(self) -> float:
        raise NotImplementedError

    def get_state(self) -> str:
        raise NotImplementedError

    def shutdown(self) -> None:
        pass
