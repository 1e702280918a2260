"""Highlight range lists kept in step with the buffer's style annotations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from vi_engine.buffer import ByteRange

VISUAL_TAG = 997
FIND_TAG = 998
MATCH_TAG = 999

TaggedRange = Tuple[ByteRange, int]


class SyncState(Enum):
    """Which side holds the authoritative copy of a ``RangeSet``.

    ``PUSH_PENDING``: the engine list is current and must be written into the
    buffer's style storage. ``PULL_PENDING``: the buffer edited the text, the
    engine list is stale and must be rebuilt from the buffer's styles.
    """

    IDLE = "idle"
    PUSH_PENDING = "push_pending"
    PULL_PENDING = "pull_pending"


@dataclass(slots=True)
class RangeSet:
    tag: int
    ranges: List[TaggedRange] = field(default_factory=list)
    sync: SyncState = SyncState.IDLE

    def request_push(self) -> None:
        self.sync = SyncState.PUSH_PENDING

    def request_pull(self) -> None:
        self.sync = SyncState.PULL_PENDING

    def take(self) -> SyncState:
        """Return the pending direction and reset it to ``IDLE``."""

        pending = self.sync
        self.sync = SyncState.IDLE
        return pending

    def replace(self, spans: List[ByteRange]) -> None:
        self.ranges = [(span, self.tag) for span in spans]
        self.request_push()

    def clear(self) -> None:
        self.ranges.clear()
        self.request_push()

    def __len__(self) -> int:
        return len(self.ranges)

    def span(self, index: int) -> ByteRange:
        return self.ranges[index][0]


__all__ = [
    "FIND_TAG",
    "MATCH_TAG",
    "VISUAL_TAG",
    "RangeSet",
    "SyncState",
    "TaggedRange",
]
