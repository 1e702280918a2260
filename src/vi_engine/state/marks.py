"""Named marks plus the bounded jump and change histories."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from vi_engine.buffer import Cursor
from vi_engine.parser import Mark, MarkKind


class MarkRegistry:
    """Maps marks to positions and keeps the jump/change lists.

    Both histories carry an index in ``[0, len]``. ``len`` is the "newest
    edge": nothing is selected and navigation from there starts at the most
    recent entry. Recording a new entry while the index points into the
    middle drops everything newer than the index first. Oldest entries are
    evicted once a list exceeds its capacity.
    """

    def __init__(self, *, jump_capacity: int = 100, change_capacity: int = 100) -> None:
        self.jump_capacity = max(1, jump_capacity)
        self.change_capacity = max(1, change_capacity)
        self.named: Dict[str, Cursor] = {}
        self.insert: Optional[Cursor] = None
        self.visual_anchor: Optional[Cursor] = None
        self.visual_lead: Optional[Cursor] = None
        self.change: List[Tuple[Cursor, Cursor]] = []
        self.change_idx = 0
        self.jump: List[Cursor] = []
        self.jump_idx = 0

    def set(self, mark: Mark, pos: Cursor) -> None:
        kind = mark.kind
        if kind is MarkKind.NAMED:
            if mark.name is not None:
                self.named[mark.name] = pos
        elif kind is MarkKind.INSERT:
            self.insert = pos
        elif kind is MarkKind.VISUAL_ANCHOR:
            self.visual_anchor = pos
        elif kind is MarkKind.VISUAL_LEAD:
            self.visual_lead = pos
        elif kind is MarkKind.CHANGE_START:
            del self.change[self._keep(self.change_idx, len(self.change)) :]
            self.change.append((pos, pos))
            self._evict(self.change, self.change_capacity)
            self.change_idx = len(self.change)
        elif kind is MarkKind.CHANGE_END:
            if self.change:
                start, _ = self.change[-1]
                self.change[-1] = (start, pos)
        elif kind is MarkKind.JUMP:
            del self.jump[self._keep(self.jump_idx, len(self.jump)) :]
            self.jump.append(pos)
            self._evict(self.jump, self.jump_capacity)
            self.jump_idx = len(self.jump)

    def get(self, mark: Mark) -> Optional[Cursor]:
        """Return the mark's position; history marks also reset to the newest edge."""

        kind = mark.kind
        if kind is MarkKind.NAMED:
            return self.named.get(mark.name or "")
        if kind is MarkKind.INSERT:
            return self.insert
        if kind is MarkKind.VISUAL_ANCHOR:
            return self.visual_anchor
        if kind is MarkKind.VISUAL_LEAD:
            return self.visual_lead
        if kind in (MarkKind.CHANGE_START, MarkKind.CHANGE_END):
            self.change_idx = len(self.change)
            if not self.change:
                return None
            start, end = self.change[-1]
            return start if kind is MarkKind.CHANGE_START else end
        self.jump_idx = len(self.jump)
        return self.jump[-1] if self.jump else None

    def navigate_jump(self, delta: int) -> Optional[Cursor]:
        self.jump_idx = _clamp(self.jump_idx + delta, len(self.jump))
        if self.jump_idx < len(self.jump):
            return self.jump[self.jump_idx]
        return None

    def navigate_change(self, delta: int) -> Optional[Cursor]:
        self.change_idx = _clamp(self.change_idx + delta, len(self.change))
        if self.change_idx < len(self.change):
            return self.change[self.change_idx][0]
        return None

    @staticmethod
    def _keep(index: int, length: int) -> int:
        # entries [0..=index] survive when the index is inside the list
        return length if index >= length else index + 1

    @staticmethod
    def _evict(entries: list, capacity: int) -> None:
        overflow = len(entries) - capacity
        if overflow > 0:
            del entries[:overflow]


def _clamp(index: int, length: int) -> int:
    return max(0, min(index, length))


__all__ = ["MarkRegistry"]
