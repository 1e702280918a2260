"""Cursor and viewport state for buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

Cursor = Tuple[int, int]  # (row, column)
Selection = Tuple[Cursor, Cursor]
ByteRange = Tuple[int, int]  # half-open


@dataclass(slots=True)
class BufferState:
    """Mutable cursor + viewport info tied to a BufferDocument version."""

    cursor: Cursor = (0, 0)
    scroll_offset: int = 0
    viewport_height: int = 24
    last_change_tick: int = 0

    def set_cursor(self, row: int, col: int) -> None:
        self.cursor = (row, col)
