"""Line storage for the text buffer collaborator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence


@dataclass(slots=True)
class BufferDocument:
    """Immutable-ish text storage built on a list-of-lines model.

    Every edit returns a new document with a bumped ``version``; graphemes
    are Python code points and lines never contain ``"\\n"``. Byte offsets
    are UTF-8 and count one byte per line break.
    """

    _lines: List[str] = field(default_factory=lambda: [""])
    version: int = 0
    dirty: bool = False
    _line_bytes: Optional[List[int]] = None

    @classmethod
    def from_text(cls, text: str) -> "BufferDocument":
        return cls(_lines=text.split("\n"), version=0, dirty=False)

    def snapshot(self) -> Sequence[str]:
        """Return the current lines without exposing internal mutability."""

        return tuple(self._lines)

    def text(self) -> str:
        return "\n".join(self._lines)

    def update_lines(
        self, start: int, end: int, new_lines: Iterable[str]
    ) -> "BufferDocument":
        """Return a document with ``[start:end]`` replaced by ``new_lines``."""

        lines = list(self._lines)
        lines[start:end] = list(new_lines)
        if not lines:
            lines = [""]
        return BufferDocument(_lines=lines, version=self.version + 1, dirty=True)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def get_line(self, index: int) -> str:
        return self._lines[index]

    def line_width(self, index: int) -> int:
        return len(self._lines[index])

    # -- byte / char offsets ---------------------------------------------

    def _line_starts(self) -> List[int]:
        if self._line_bytes is None:
            starts = []
            running = 0
            for line in self._lines:
                starts.append(running)
                running += len(line.encode("utf-8")) + 1
            self._line_bytes = starts
        return self._line_bytes

    @property
    def len_bytes(self) -> int:
        last = len(self._lines) - 1
        return self._line_starts()[last] + len(self._lines[last].encode("utf-8"))

    def byte_at(self, row: int, col: int) -> int:
        line = self._lines[row]
        return self._line_starts()[row] + len(line[:col].encode("utf-8"))

    def pos_at_byte(self, byte: int) -> tuple[int, int]:
        """Map a byte offset to ``(row, col)``; offsets inside a code point round down."""

        starts = self._line_starts()
        byte = max(0, min(byte, self.len_bytes))
        row = 0
        lo, hi = 0, len(starts) - 1
        while lo <= hi:
            mid = (lo + hi) // 2
            if starts[mid] <= byte:
                row = mid
                lo = mid + 1
            else:
                hi = mid - 1
        encoded = self._lines[row].encode("utf-8")
        local = min(byte - starts[row], len(encoded))
        return (row, len(encoded[:local].decode("utf-8", errors="ignore")))

    def char_offset(self, row: int, col: int) -> int:
        offset = 0
        for index in range(row):
            offset += len(self._lines[index]) + 1
        return offset + col

    def pos_at_char(self, offset: int) -> tuple[int, int]:
        running = 0
        for row, line in enumerate(self._lines):
            if offset <= running + len(line):
                return (row, max(0, offset - running))
            running += len(line) + 1
        last = len(self._lines) - 1
        return (last, len(self._lines[last]))
