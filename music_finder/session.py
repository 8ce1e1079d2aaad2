import logging

from .engine import STATE_PLAYING

UNLOAD_WHEN_PLAYING = "playing"
UNLOAD_WHEN_HISTORY = "history"
UNLOAD_POLICIES = {UNLOAD_WHEN_PLAYING, UNLOAD_WHEN_HISTORY}


class SessionGate:
    """One-way latch set by the first user play/pause; gates automatic playback."""

    def __init__(self):
        self._user_has_interacted = False

    @property
    def user_has_interacted(self) -> bool:
        return self._user_has_interacted

    def mark_interacted(self) -> None:
        if not self._user_has_interacted:
            self._user_has_interacted = True
            logging.info("Session gate opened: automatic playback allowed")

    def allows_autoplay(self) -> bool:
        return self._user_has_interacted


def should_confirm_unload(engine_state: str, history_size: int, policy: str = UNLOAD_WHEN_PLAYING) -> bool:
    if policy == UNLOAD_WHEN_HISTORY:
        return history_size > 0
    return engine_state == STATE_PLAYING
