import logging
from typing import Callable

from PySide6.QtCore import QObject, QTimer

from .engine import PlaybackEngine
from .utils import format_time, is_known_duration

DEFAULT_TICK_MS = 1000

ProgressListener = Callable[[str, str, float], None]


def compute_progress(position, duration) -> tuple[str, str, float]:
    """Elapsed text, total text and 0..1 fraction; unknown duration gives 0.0."""
    if not is_known_duration(position):
        position = 0.0
    if not is_known_duration(duration):
        return format_time(position), format_time(0), 0.0
    fraction = min(1.0, max(0.0, float(position) / float(duration)))
    return format_time(position), format_time(duration), fraction


class TransportSync(QObject):
    """Republishes engine position/duration on a fixed cadence while playing."""

    def __init__(
        self,
        engine: PlaybackEngine,
        on_progress: ProgressListener,
        interval_ms: int = DEFAULT_TICK_MS,
        on_tick: Callable[[], None] | None = None,
        parent=None,
    ):
        super().__init__(parent)
        self._engine = engine
        self._on_progress = on_progress
        self._timer = QTimer(self)
        self._timer.setInterval(int(interval_ms))
        # The controller routes ticks through its dispatcher when given.
        self._timer.timeout.connect(on_tick or self.publish)

    def is_active(self) -> bool:
        return self._timer.isActive()

    def interval(self) -> int:
        return self._timer.interval()

    def start(self) -> None:
        self.stop()
        self._timer.start()
        self.publish()

    def stop(self) -> None:
        if self._timer.isActive():
            self._timer.stop()
            logging.debug("Transport sync stopped")

    def publish(self) -> None:
        try:
            position = self._engine.get_current_time()
            duration = self._engine.get_duration()
        except Exception as e:
            logging.debug("Transport sync read failed: %s", e)
            return
        self._on_progress(*compute_progress(position, duration))
