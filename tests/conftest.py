import pytest
from PySide6.QtCore import QCoreApplication

from music_finder.engine import (
    PlaybackEngine,
    STATE_ENDED,
    STATE_ERROR,
    STATE_PAUSED,
    STATE_PLAYING,
    STATE_UNSTARTED,
)


@pytest.fixture(scope="session", autouse=True)
def qapp():
    # QTimer needs an event dispatcher on the main thread.
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


class FakeEngine(PlaybackEngine):
    """In-memory engine: records commands, lets tests push lifecycle events."""

    def __init__(self):
        super().__init__()
        self.calls = []
        self.state = STATE_UNSTARTED
        self.position = 0.0
        self.duration = 0.0
        self.end_on_next_play = False
        self.shut_down = False

    def load(self, track_id):
        self.calls.append(("load", track_id))
        self.state = STATE_UNSTARTED

    def play(self):
        self.calls.append(("play",))
        if self.end_on_next_play:
            # Zero-length media: the engine reports "ended" from inside play().
            self.end_on_next_play = False
            self.finish()

    def pause(self):
        self.calls.append(("pause",))

    def seek_to(self, seconds):
        self.calls.append(("seek_to", seconds))

    def set_volume(self, level):
        self.calls.append(("set_volume", level))

    def get_current_time(self):
        return self.position

    def get_duration(self):
        return self.duration

    def get_state(self):
        return self.state

    def shutdown(self):
        self.shut_down = True

    # test helpers
    def start_playing(self):
        self.state = STATE_PLAYING
        self.emit_state(STATE_PLAYING)

    def pause_playback(self):
        self.state = STATE_PAUSED
        self.emit_state(STATE_PAUSED)

    def finish(self):
        self.state = STATE_ENDED
        self.emit_state(STATE_ENDED)

    def fail(self, code=150):
        self.state = STATE_ERROR
        self.emit_state(STATE_ERROR)
        self.emit_error(code)

    def loads(self):
        return [call[1] for call in self.calls if call[0] == "load"]


@pytest.fixture
def engine():
    return FakeEngine()
