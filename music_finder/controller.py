"""Playback orchestration: history, navigation, autoplay continuation.

Every input (button press, engine event, timer tick) becomes one of three
event types and goes through ``PlaybackController.dispatch``. Events that
arrive while another one is being handled are queued behind it, so an
engine reporting ``ended`` synchronously from inside ``play`` never
recurses into track selection.
"""

import logging
import random
from collections import deque
from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QObject, Signal

from .engine import (
    PlaybackEngine,
    STATE_ENDED,
    STATE_ERROR,
    STATE_PAUSED,
    STATE_PLAYING,
    STATE_UNSTARTED,
)
from .history import DEDUP_CURRENT, History, Track
from .logic import WRAP_REPEAT_ALL, PlaybackMode, get_adjacent_index
from .session import SessionGate, UNLOAD_WHEN_PLAYING, should_confirm_unload
from .transport import DEFAULT_TICK_MS, TransportSync
from .utils import REPEAT_ONE, is_known_duration, thumbnail_url

STATUS_IDLE = "idle"
STATUS_LOADING = "loading"
STATUS_PLAYING = "playing"
STATUS_PAUSED = "paused"
STATUS_ENDED = "ended"

CMD_PLAY_SELECTED = "play_selected"
CMD_SELECT_HISTORY = "select_history"
CMD_NEXT = "next"
CMD_PREVIOUS = "previous"
CMD_TOGGLE_PLAY = "toggle_play"
CMD_PLAY = "play"
CMD_PAUSE = "pause"
CMD_SEEK = "seek"
CMD_SET_VOLUME = "set_volume"
CMD_TOGGLE_SHUFFLE = "toggle_shuffle"
CMD_CYCLE_REPEAT = "cycle_repeat"


@dataclass(frozen=True)
class UserCommand:
    name: str
    args: tuple = ()


@dataclass(frozen=True)
class EngineEvent:
    """A state change, or an error report when ``code`` is set."""

    state: str
    code: Optional[int] = None

    @property
    def is_error(self) -> bool:
        return self.code is not None


@dataclass(frozen=True)
class TimerTick:
    pass


class PlaybackController(QObject):
    historyChanged = Signal(list, int)
    nowPlayingChanged = Signal(str, str)
    progressChanged = Signal(str, str, float)
    playStateChanged = Signal(bool)
    modesChanged = Signal(bool, int)

    def __init__(
        self,
        engine: PlaybackEngine,
        dedup_policy: str = DEDUP_CURRENT,
        wrap_policy: str = WRAP_REPEAT_ALL,
        unload_policy: str = UNLOAD_WHEN_PLAYING,
        tick_ms: int = DEFAULT_TICK_MS,
        rng: random.Random | None = None,
        parent=None,
    ):
        super().__init__(parent)
        self.engine = engine
        self.history = History(on_changed=self._on_history_changed, dedup_policy=dedup_policy)
        self.mode = PlaybackMode()
        self.gate = SessionGate()
        self.wrap_policy = wrap_policy
        self.unload_policy = unload_policy
        self.status = STATUS_IDLE
        self._rng = rng
        self._loaded_track: Optional[Track] = None
        self._failure_streak = 0
        self._queue = deque()
        self._dispatching = False
        self.transport = TransportSync(
            engine,
            self.progressChanged.emit,
            interval_ms=tick_ms,
            on_tick=lambda: self.dispatch(TimerTick()),
            parent=self,
        )
        self._commands = {
            CMD_PLAY_SELECTED: self._play_selected,
            CMD_SELECT_HISTORY: self._select_history,
            CMD_NEXT: self._user_next,
            CMD_PREVIOUS: self._user_previous,
            CMD_TOGGLE_PLAY: self._toggle_play,
            CMD_PLAY: self._play,
            CMD_PAUSE: self._pause,
            CMD_SEEK: self._seek,
            CMD_SET_VOLUME: self._set_volume,
            CMD_TOGGLE_SHUFFLE: self._toggle_shuffle,
            CMD_CYCLE_REPEAT: self._cycle_repeat,
        }
        engine.set_listeners(self._on_engine_state, self._on_engine_error)

    # public API
    def play_selected(self, track: Track, add_to_history: bool = True):
        self.dispatch(UserCommand(CMD_PLAY_SELECTED, (track, add_to_history)))

    def select_history(self, index: int):
        self.dispatch(UserCommand(CMD_SELECT_HISTORY, (index,)))

    def next_track(self):
        self.dispatch(UserCommand(CMD_NEXT))

    def prev_track(self):
        self.dispatch(UserCommand(CMD_PREVIOUS))

    def toggle_play(self):
        self.dispatch(UserCommand(CMD_TOGGLE_PLAY))

    def play(self):
        self.dispatch(UserCommand(CMD_PLAY))

    def pause(self):
        self.dispatch(UserCommand(CMD_PAUSE))

    def seek(self, fraction: float):
        self.dispatch(UserCommand(CMD_SEEK, (fraction,)))

    def set_volume(self, level: int):
        self.dispatch(UserCommand(CMD_SET_VOLUME, (level,)))

    def toggle_shuffle(self):
        self.dispatch(UserCommand(CMD_TOGGLE_SHUFFLE))

    def cycle_repeat(self):
        self.dispatch(UserCommand(CMD_CYCLE_REPEAT))

    @property
    def loaded_track(self) -> Optional[Track]:
        return self._loaded_track

    def should_confirm_close(self) -> bool:
        return should_confirm_unload(self.engine.get_state(), len(self.history), self.unload_policy)

    def publish_state(self):
        """Push the full control state to freshly connected views."""
        self._on_history_changed(self.history.tracks(), self.history.index)
        self.modesChanged.emit(self.mode.shuffle, self.mode.repeat)
        self.playStateChanged.emit(self.engine.get_state() == STATE_PLAYING)

    def shutdown(self):
        self.transport.stop()
        self._queue.clear()
        self.engine.shutdown()

    # dispatcher
    def dispatch(self, event):
        self._queue.append(event)
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._queue:
                self._handle(self._queue.popleft())
        finally:
            self._dispatching = False

    def _handle(self, event):
        if isinstance(event, TimerTick):
            self.transport.publish()
        elif isinstance(event, EngineEvent):
            if event.is_error:
                self._on_track_failed(event.code)
            else:
                self._on_state_changed(event.state)
        elif isinstance(event, UserCommand):
            handler = self._commands.get(event.name)
            if handler is None:
                logging.warning("Unknown command: %s", event.name)
                return
            handler(*event.args)
        else:
            raise TypeError(f"unsupported event: {event!r}")

    def _on_engine_state(self, state: str):
        self.dispatch(EngineEvent(state))

    def _on_engine_error(self, code: int):
        self.dispatch(EngineEvent(STATE_ERROR, int(code)))

    def _on_history_changed(self, tracks: list, index: Optional[int]):
        self.historyChanged.emit(tracks, -1 if index is None else index)

    # track changes
    def _play_selected(self, track: Track, add_to_history: bool = True, automatic: bool = False):
        logging.info(
            "Play selected: id=%s title=%r add_to_history=%s automatic=%s",
            track.video_id,
            track.title,
            add_to_history,
            automatic,
        )
        if not automatic:
            self._failure_streak = 0
        if add_to_history:
            self.history.record_and_select(track)
        self._loaded_track = track
        self.status = STATUS_LOADING
        self.engine.load(track.video_id)
        if not automatic or self.gate.allows_autoplay():
            self.engine.play()
        else:
            logging.warning("Autoplay deferred until first user interaction")
        self.nowPlayingChanged.emit(track.title, thumbnail_url(track.video_id))

    def _select_history(self, index: int):
        if not self.history.select_at(index):
            return
        self._play_selected(self.history.current_track(), add_to_history=False)

    def _navigate(self, forward: bool, automatic: bool = False) -> bool:
        next_index = get_adjacent_index(
            len(self.history),
            self.history.index,
            self.mode,
            forward,
            wrap_policy=self.wrap_policy,
            rng=self._rng,
        )
        if next_index is None:
            logging.info(
                "No %s track: index=%s history=%d",
                "next" if forward else "previous",
                self.history.index,
                len(self.history),
            )
            return False
        self.history.select_at(next_index)
        self._play_selected(self.history.current_track(), add_to_history=False, automatic=automatic)
        logging.info("%s track: index=%d history=%d", "Next" if forward else "Prev", next_index, len(self.history))
        return True

    def _user_next(self):
        self._navigate(forward=True)

    def _user_previous(self):
        self._navigate(forward=False)

    def _stop(self):
        logging.info("Playback stopped: index=%s", self.history.index)
        self.status = STATUS_ENDED
        self.transport.stop()
        self.playStateChanged.emit(False)

    # engine events
    def _on_state_changed(self, state: str):
        if state == STATE_PLAYING:
            self._failure_streak = 0
            self.status = STATUS_PLAYING
            self.transport.start()
        else:
            self.transport.stop()
        self.playStateChanged.emit(state == STATE_PLAYING)

        if state == STATE_PAUSED:
            self.status = STATUS_PAUSED
        elif state == STATE_UNSTARTED and self._loaded_track is not None:
            self.status = STATUS_LOADING
        elif state == STATE_ENDED:
            self._on_track_finished()

    def _on_track_finished(self):
        self.status = STATUS_ENDED
        if not self.gate.allows_autoplay():
            logging.warning("Autoplay blocked: no user interaction yet")
            return
        if self.mode.repeat == REPEAT_ONE:
            logging.info("Repeat one: replaying %s", self._loaded_track and self._loaded_track.video_id)
            self.engine.play()
            return
        if not self._navigate(forward=True, automatic=True):
            self._stop()

    def _on_track_failed(self, code: int):
        # Never replay here, even under repeat-one: the engine refused this track.
        logging.warning("Video restricted or error (code=%s). Skipping...", code)
        self._failure_streak += 1
        if self._failure_streak >= len(self.history):
            logging.warning("Every track in history failed in a row (%d); giving up", self._failure_streak)
            self._stop()
            return
        if not self._navigate(forward=True, automatic=True):
            self._stop()

    # transport commands
    def _toggle_play(self):
        self.gate.mark_interacted()
        if self.engine.get_state() == STATE_PLAYING:
            self.engine.pause()
            return
        self._resume()

    def _play(self):
        self.gate.mark_interacted()
        self._resume()

    def _pause(self):
        self.engine.pause()

    def _resume(self):
        if self._loaded_track is None:
            track = self.history.current_track()
            if track is None:
                logging.info("Nothing to play yet")
                return
            self._play_selected(track, add_to_history=False)
            return
        self.engine.play()

    def _seek(self, fraction: float):
        duration = self.engine.get_duration()
        if not is_known_duration(duration):
            logging.debug("Seek ignored: duration unknown (%r)", duration)
            return
        fraction = min(1.0, max(0.0, float(fraction)))
        self.engine.seek_to(fraction * float(duration))

    def _set_volume(self, level: int):
        self.engine.set_volume(max(0, min(100, int(level))))

    def _toggle_shuffle(self):
        self.mode.toggle_shuffle()
        self.modesChanged.emit(self.mode.shuffle, self.mode.repeat)

    def _cycle_repeat(self):
        self.mode.cycle_repeat()
        self.modesChanged.emit(self.mode.shuffle, self.mode.repeat)
