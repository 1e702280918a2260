"""Bidirectional grapheme cursor over a document snapshot."""

from __future__ import annotations

from typing import Iterator, Optional, Sequence

from .state import Cursor


class GraphemeCursor:
    """Walks the graphemes of a line snapshot in both directions.

    The cursor sits *between* graphemes. ``next`` returns the grapheme after
    the cursor and steps over it; ``prev`` returns the grapheme before it and
    steps back. Line breaks are reported as ``"\\n"``. Both return ``None`` at
    the ends of the text.
    """

    __slots__ = ("_lines", "_row", "_col")

    def __init__(self, lines: Sequence[str], pos: Cursor = (0, 0)) -> None:
        self._lines = lines
        self._row, self._col = pos

    @property
    def pos(self) -> Cursor:
        return (self._row, self._col)

    def at_start(self) -> bool:
        return self._row == 0 and self._col == 0

    def at_end(self) -> bool:
        last = len(self._lines) - 1
        return self._row == last and self._col >= len(self._lines[last])

    def peek_next(self) -> Optional[str]:
        line = self._lines[self._row]
        if self._col < len(line):
            return line[self._col]
        if self._row + 1 < len(self._lines):
            return "\n"
        return None

    def peek_prev(self) -> Optional[str]:
        if self._col > 0:
            return self._lines[self._row][self._col - 1]
        if self._row > 0:
            return "\n"
        return None

    def next(self) -> Optional[str]:
        grapheme = self.peek_next()
        if grapheme is None:
            return None
        if grapheme == "\n":
            self._row += 1
            self._col = 0
        else:
            self._col += 1
        return grapheme

    def prev(self) -> Optional[str]:
        grapheme = self.peek_prev()
        if grapheme is None:
            return None
        if grapheme == "\n":
            self._row -= 1
            self._col = len(self._lines[self._row])
        else:
            self._col -= 1
        return grapheme

    def forward(self) -> Iterator[str]:
        while (grapheme := self.next()) is not None:
            yield grapheme

    def backward(self) -> Iterator[str]:
        while (grapheme := self.prev()) is not None:
            yield grapheme


__all__ = ["GraphemeCursor"]
