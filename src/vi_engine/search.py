"""Pattern search and single-character finds.

Match and find hits are stored as UTF-8 byte ranges in the ``RangeSet`` of
``ViState.matches`` / ``ViState.finds`` so they can be pushed into the
buffer's style storage unchanged. Ordinal selection over matches wraps
around the buffer; finds stay on one row and never wrap.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple

from vi_engine.buffer import ByteRange, Cursor, RegisterBank, TextBufferProtocol
from vi_engine.buffer.registers import SEARCH
from vi_engine.parser import Direction
from vi_engine.runtime import telemetry
from vi_engine.state import ViState


class SearchError(RuntimeError):
    """A pattern could not be compiled or run.

    ``kind`` is ``"pattern"`` for a malformed expression, ``"build"`` when
    the matcher could not be constructed and ``"execute"`` when the scan
    itself failed.
    """

    def __init__(self, kind: str, pattern: str, message: str) -> None:
        super().__init__(f"{kind} error in /{pattern}/: {message}")
        self.kind = kind
        self.pattern = pattern


def _compile(term: str) -> "re.Pattern[str]":
    try:
        return re.compile(term, re.MULTILINE)
    except re.error as exc:
        raise SearchError("pattern", term, str(exc)) from exc
    except (OverflowError, RecursionError, ValueError) as exc:
        raise SearchError("build", term, str(exc)) from exc


def _to_bytes(text: str, spans: Iterable[Tuple[int, int]]) -> List[ByteRange]:
    """Convert ascending char spans of ``text`` to byte spans in one pass."""

    result: List[ByteRange] = []
    char_pos = 0
    byte_pos = 0
    for start, end in spans:
        byte_pos += len(text[char_pos:start].encode("utf-8"))
        byte_end = byte_pos + len(text[start:end].encode("utf-8"))
        result.append((byte_pos, byte_end))
        char_pos, byte_pos = end, byte_end
    return result


def _scan(text: str, term: str) -> List[ByteRange]:
    pattern = _compile(term)
    with telemetry.span("search::scan", logger_name="vi_engine.search", metadata={"pattern": term}):
        try:
            spans = [m.span() for m in pattern.finditer(text) if m.end() > m.start()]
        except (RecursionError, MemoryError) as exc:
            raise SearchError("execute", term, str(exc)) from exc
    return _to_bytes(text, spans)


def search(
    buffer: TextBufferProtocol,
    vi: ViState,
    term: str,
    direction: Direction,
    temporary: bool,
    *,
    registers: Optional[RegisterBank] = None,
) -> None:
    """Recompute ``vi.matches`` for ``term``.

    An empty final term reuses the previous one; an empty temporary term
    clears the highlights. The match list is only replaced after the scan
    succeeds, so a ``SearchError`` leaves the previous state untouched.
    """

    matches = vi.matches
    if not term:
        if temporary:
            matches.clear()
            return
        if matches.term is None:
            return
        term = matches.term

    if term != matches.term or len(matches) == 0 or matches.temporary:
        try:
            hits = _scan(buffer.text(), term)
        except SearchError as exc:
            telemetry.record_event(
                "search.error",
                level="warning",
                data={"kind": exc.kind, "pattern": term},
                logger_name="vi_engine.search",
            )
            raise
        matches.ranges.replace(hits)
        matches.idx = None

    matches.term = term
    matches.direction = direction
    matches.temporary = temporary
    if not temporary and registers is not None:
        registers.yank_to(SEARCH, term)


def select_match(
    vi: ViState, cursor_byte: int, count: int, direction: Direction
) -> Optional[int]:
    """Advance ``count`` matches from ``cursor_byte`` and return the hit's start byte."""

    ranges = vi.matches.ranges
    total = len(ranges)
    if total == 0:
        return None
    starts = [ranges.span(i)[0] for i in range(total)]
    position = cursor_byte
    index = 0
    for _ in range(max(count, 1)):
        if direction is Direction.FORWARD:
            index = next((i for i, s in enumerate(starts) if s > position), 0)
        else:
            index = next(
                (i for i in range(total - 1, -1, -1) if starts[i] < position),
                total - 1,
            )
        position = starts[index]
    vi.matches.idx = index
    return position


def find(
    buffer: TextBufferProtocol, vi: ViState, row: int, char: str, direction: Direction, till: bool
) -> None:
    """Collect every occurrence of ``char`` on ``row`` into ``vi.finds``."""

    line = buffer.line(row)
    base = buffer.byte_at((row, 0))
    spans = [(i, i + len(char)) for i in _occurrences(line, char)]
    hits = [(base + start, base + end) for start, end in _to_bytes(line, spans)]
    finds = vi.finds
    finds.term = char
    finds.row = row
    finds.direction = direction
    finds.till = till
    finds.idx = None
    finds.ranges.replace(hits)


def _occurrences(line: str, char: str) -> List[int]:
    if not char:
        return []
    found = []
    index = line.find(char)
    while index >= 0:
        found.append(index)
        index = line.find(char, index + 1)
    return found


def select_find(
    buffer: TextBufferProtocol, vi: ViState, cursor: Cursor, count: int, direction: Direction
) -> Optional[Cursor]:
    """Move to the ``count``-th find hit in ``direction`` on the cursor row.

    Counts beyond the last hit clamp to it; with no hit in that direction
    the result is ``None``. ``till`` finds stop one column short, and skip
    a hit directly adjacent to the cursor so ``;`` makes progress.
    """

    finds = vi.finds
    if finds.term is None:
        return None
    row, col = cursor
    if finds.row != row or len(finds) == 0:
        find(buffer, vi, row, finds.term, finds.direction, finds.till)
    columns = _occurrences(buffer.line(row), finds.term)
    skip = 1 if finds.till else 0
    if direction is Direction.FORWARD:
        ahead = [c for c in columns if c > col + skip]
        if not ahead:
            return None
        index = min(max(count, 1), len(ahead)) - 1
        target = ahead[index]
        finds.idx = columns.index(target)
        return (row, target - 1 if finds.till else target)
    behind = [c for c in reversed(columns) if c < col - skip]
    if not behind:
        return None
    index = min(max(count, 1), len(behind)) - 1
    target = behind[index]
    finds.idx = columns.index(target)
    return (row, target + 1 if finds.till else target)


def word_pattern(word: str) -> str:
    return r"\b" + re.escape(word) + r"\b"


__all__ = [
    "SearchError",
    "find",
    "search",
    "select_find",
    "select_match",
    "word_pattern",
]
