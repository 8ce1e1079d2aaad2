import random
from dataclasses import dataclass
from typing import Optional

from .utils import REPEAT_ALL, REPEAT_CYCLE, REPEAT_OFF

WRAP_REPEAT_ALL = "repeat_all"
WRAP_ALWAYS = "always"
WRAP_POLICIES = {WRAP_REPEAT_ALL, WRAP_ALWAYS}


@dataclass
class PlaybackMode:
    shuffle: bool = False
    repeat: int = REPEAT_OFF

    def toggle_shuffle(self) -> bool:
        self.shuffle = not self.shuffle
        return self.shuffle

    def cycle_repeat(self) -> int:
        pos = REPEAT_CYCLE.index(self.repeat) if self.repeat in REPEAT_CYCLE else 0
        self.repeat = REPEAT_CYCLE[(pos + 1) % len(REPEAT_CYCLE)]
        return self.repeat


def _wraps(repeat: int, wrap_policy: str) -> bool:
    return repeat == REPEAT_ALL or wrap_policy == WRAP_ALWAYS


def get_next_index(
    size: int,
    current_index: Optional[int],
    shuffle: bool,
    repeat: int,
    wrap_policy: str = WRAP_REPEAT_ALL,
    rng: random.Random | None = None,
) -> Optional[int]:
    """Index to move to on "next", or None when nothing should change.

    Repeat-one is ignored here; it only governs what happens
    when a track finishes on its own.
    """
    if size <= 0:
        return None
    if current_index is None:
        return 0
    if shuffle:
        rng = rng or random
        next_index = rng.randrange(size)
        while size > 1 and next_index == current_index:
            next_index = rng.randrange(size)
        return next_index

    if current_index + 1 < size:
        return current_index + 1
    if _wraps(repeat, wrap_policy):
        return (current_index + 1) % size
    return None


def get_previous_index(
    size: int,
    current_index: Optional[int],
    repeat: int,
    wrap_policy: str = WRAP_REPEAT_ALL,
) -> Optional[int]:
    """Index to move to on "previous". Shuffle never applies going back."""
    if size <= 0:
        return None
    if current_index is None:
        return 0
    if current_index > 0:
        return current_index - 1
    if _wraps(repeat, wrap_policy):
        return size - 1
    return None


def get_adjacent_index(
    size: int,
    current_index: Optional[int],
    mode: PlaybackMode,
    forward: bool,
    wrap_policy: str = WRAP_REPEAT_ALL,
    rng: random.Random | None = None,
) -> Optional[int]:
    if forward:
        return get_next_index(size, current_index, mode.shuffle, mode.repeat, wrap_policy, rng)
    return get_previous_index(size, current_index, mode.repeat, wrap_policy)
