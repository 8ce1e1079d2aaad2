"""Ordered play history with a current-position pointer (no UI)."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

DEDUP_CURRENT = "current"
DEDUP_TAIL = "tail"
DEDUP_POLICIES = {DEDUP_CURRENT, DEDUP_TAIL}


@dataclass(frozen=True)
class Track:
    """A playable item: engine video id plus display title. Equal by id."""

    video_id: str
    title: str = field(default="", compare=False)

    @classmethod
    def from_result(cls, item: dict) -> "Track":
        return cls(str(item.get("videoId") or ""), str(item.get("title") or "No Title"))

    def to_result(self) -> dict:
        return {"videoId": self.video_id, "title": self.title}


class History:
    """Tracks chosen for playback plus the index of the one being played.

    Only ``record_and_select`` appends; navigation moves the index with
    ``select_at``. ``on_changed(tracks, index)`` fires after every mutation.
    """

    def __init__(
        self,
        on_changed: Callable[[list, Optional[int]], None] | None = None,
        dedup_policy: str = DEDUP_CURRENT,
    ) -> None:
        if dedup_policy not in DEDUP_POLICIES:
            raise ValueError(f"invalid dedup policy: {dedup_policy}")
        self._tracks: list[Track] = []
        self._index: Optional[int] = None
        self._on_changed = on_changed
        self.dedup_policy = dedup_policy

    def __len__(self) -> int:
        return len(self._tracks)

    @property
    def index(self) -> Optional[int]:
        return self._index

    def is_empty(self) -> bool:
        return not self._tracks

    def tracks(self) -> list[Track]:
        return list(self._tracks)

    def current_track(self) -> Optional[Track]:
        if self._index is None:
            return None
        return self._tracks[self._index]

    def _dedup_target(self) -> Optional[int]:
        if not self._tracks:
            return None
        if self.dedup_policy == DEDUP_TAIL:
            return len(self._tracks) - 1
        return self._index

    def record_and_select(self, track: Track) -> int:
        """Append ``track`` unless it repeats the comparison entry; select it."""
        target = self._dedup_target()
        if target is not None and self._tracks[target] == track:
            logging.debug("History dedup: %s already at %d", track.video_id, target)
            self._index = target
        else:
            self._tracks.append(track)
            self._index = len(self._tracks) - 1
        self._notify()
        return self._index

    def select_at(self, index: int) -> bool:
        if not (0 <= index < len(self._tracks)):
            logging.info("Invalid history index %s (size=%d)", index, len(self._tracks))
            return False
        self._index = index
        self._notify()
        return True

    def _notify(self) -> None:
        if self._on_changed:
            self._on_changed(self.tracks(), self._index)
