"""Per-widget engine state that survives mode transitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from vi_engine.buffer import Cursor
from vi_engine.config import EngineConfig
from vi_engine.parser import Direction, Vim, VimKind

from .marks import MarkRegistry
from .ranges import FIND_TAG, MATCH_TAG, VISUAL_TAG, RangeSet


@dataclass(slots=True)
class FindState:
    """Hits of the last ``f``/``F``/``t``/``T`` on one row."""

    term: Optional[str] = None
    row: int = 0
    direction: Direction = Direction.FORWARD
    till: bool = False
    idx: Optional[int] = None
    ranges: RangeSet = field(default_factory=lambda: RangeSet(FIND_TAG))

    def clear(self) -> None:
        self.term = None
        self.row = 0
        self.direction = Direction.FORWARD
        self.till = False
        self.idx = None
        self.ranges.clear()

    def __len__(self) -> int:
        return len(self.ranges)


@dataclass(slots=True)
class MatchState:
    """Hits of the last ``/`` or ``?`` pattern over the whole buffer."""

    term: Optional[str] = None
    direction: Direction = Direction.FORWARD
    temporary: bool = False
    idx: Optional[int] = None
    ranges: RangeSet = field(default_factory=lambda: RangeSet(MATCH_TAG))

    def clear(self) -> None:
        self.term = None
        self.direction = Direction.FORWARD
        self.temporary = False
        self.idx = None
        self.ranges.clear()

    def __len__(self) -> int:
        return len(self.ranges)


@dataclass(slots=True)
class VisualState:
    block: bool = False
    line: bool = False
    anchor: Cursor = (0, 0)
    lead: Cursor = (0, 0)
    ranges: RangeSet = field(default_factory=lambda: RangeSet(VISUAL_TAG))

    def clear(self) -> None:
        self.block = False
        self.line = False
        self.anchor = (0, 0)
        self.lead = (0, 0)
        self.ranges.clear()

    @property
    def ordered(self) -> Tuple[Cursor, Cursor]:
        if self.anchor <= self.lead:
            return self.anchor, self.lead
        return self.lead, self.anchor


@dataclass(slots=True)
class ViState:
    """Everything the engine remembers between keys for one editable widget.

    ``last_command`` and ``text`` hold the last repeatable command and the
    text typed during its insert session; ``visual_extent`` is the
    ``(rows, cols)`` size of the last visual change so ``.`` can redo it.
    ``page`` is the half-page size set by a count on ``Ctrl-U``/``Ctrl-D``.
    """

    config: EngineConfig = field(default_factory=EngineConfig)
    marks: MarkRegistry = field(init=False)
    finds: FindState = field(default_factory=FindState)
    matches: MatchState = field(default_factory=MatchState)
    visual: VisualState = field(default_factory=VisualState)
    last_command: Optional[Vim] = None
    text: str = ""
    insert_count: int = 1
    insert_kind: VimKind = VimKind.INSERT
    page: int = 0
    visual_extent: Optional[Tuple[int, int, bool, bool]] = None

    def __post_init__(self) -> None:
        self.marks = MarkRegistry(
            jump_capacity=self.config.jump_capacity,
            change_capacity=self.config.change_capacity,
        )

    def request_pull(self) -> None:
        """Mark find/match highlights stale after a text edit."""

        self.finds.ranges.request_pull()
        self.matches.ranges.request_pull()


__all__ = ["FindState", "MatchState", "ViState", "VisualState"]
