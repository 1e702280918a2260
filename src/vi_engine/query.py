"""Read-only text queries behind motions and text objects.

All functions take the buffer collaborator and a position and return a new
position (or a ``(start, end)`` span for text objects) without touching the
buffer. ``None`` means the query has no answer, e.g. no word left after the
cursor; callers treat that as "no movement".
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from vi_engine.buffer import Cursor, GraphemeCursor, TextBufferProtocol
from vi_engine.parser import TxtObj

Span = Tuple[Cursor, Cursor]

_BRACKETS = {"(": ")", "[": "]", "{": "}", "<": ">"}
_CLOSERS = {close: open_ for open_, close in _BRACKETS.items()}
_SENTENCE_END = re.compile(r"[.!?][)\]\"']*(?:[ \t]+|\n|$)")
_TAG = re.compile(r"<(/?)([A-Za-z][\w:.-]*)[^<>]*?(/?)>")


def char_class(grapheme: Optional[str], big: bool = False) -> int:
    """0 for blanks/line breaks, 1 for word characters, 2 for punctuation.

    With ``big`` (WORD motions) every non-blank is class 1.
    """

    if grapheme is None or grapheme.isspace():
        return 0
    if big or grapheme.isalnum() or grapheme == "_":
        return 1
    return 2


def _is_blank_row(buffer: TextBufferProtocol, row: int) -> bool:
    return buffer.line_width(row) == 0


def _last_row(buffer: TextBufferProtocol) -> int:
    return buffer.len_lines() - 1


def end_of_buffer(buffer: TextBufferProtocol) -> Cursor:
    last = _last_row(buffer)
    return (last, buffer.line_width(last))


# -- lines -----------------------------------------------------------------


def move_left(buffer: TextBufferProtocol, pos: Cursor, count: int) -> Cursor:
    row, col = pos
    return (row, max(col - count, 0))


def move_right(buffer: TextBufferProtocol, pos: Cursor, count: int) -> Cursor:
    row, col = pos
    return (row, min(col + count, buffer.line_width(row)))


def move_vertical(buffer: TextBufferProtocol, pos: Cursor, delta: int) -> Cursor:
    row, col = pos
    target = max(0, min(row + delta, _last_row(buffer)))
    return (target, min(col, buffer.line_width(target)))


def first_non_blank(buffer: TextBufferProtocol, row: int) -> Cursor:
    line = buffer.line(row)
    stripped = len(line) - len(line.lstrip())
    return (row, stripped)


def end_of_line(buffer: TextBufferProtocol, pos: Cursor, count: int = 1) -> Cursor:
    row = min(pos[0] + max(count, 1) - 1, _last_row(buffer))
    return (row, buffer.line_width(row))


def line_text_down(buffer: TextBufferProtocol, pos: Cursor, count: int = 1) -> Cursor:
    row = min(pos[0] + max(count, 1) - 1, _last_row(buffer))
    return first_non_blank(buffer, row)


def end_of_line_text(buffer: TextBufferProtocol, pos: Cursor, count: int = 1) -> Cursor:
    row = min(pos[0] + max(count, 1) - 1, _last_row(buffer))
    return (row, len(buffer.line(row).rstrip()))


def to_col(buffer: TextBufferProtocol, pos: Cursor, count: int) -> Cursor:
    row = pos[0]
    return (row, min(max(count - 1, 0), buffer.line_width(row)))


def to_line(buffer: TextBufferProtocol, count: int) -> Cursor:
    row = max(0, min(count - 1, _last_row(buffer)))
    return first_non_blank(buffer, row)


def to_line_percent(buffer: TextBufferProtocol, count: int) -> Cursor:
    percent = max(0, min(count, 100))
    row = (percent * buffer.len_lines() + 99) // 100
    return to_line(buffer, max(row, 1))


def screen_top(buffer: TextBufferProtocol, count: int) -> Cursor:
    top = buffer.scroll_offset()
    bottom = min(top + buffer.viewport_height() - 1, _last_row(buffer))
    return first_non_blank(buffer, min(top + max(count - 1, 0), bottom))


def screen_middle(buffer: TextBufferProtocol) -> Cursor:
    top = buffer.scroll_offset()
    bottom = min(top + buffer.viewport_height() - 1, _last_row(buffer))
    return first_non_blank(buffer, top + (bottom - top) // 2)


def screen_bottom(buffer: TextBufferProtocol, count: int) -> Cursor:
    top = buffer.scroll_offset()
    bottom = min(top + buffer.viewport_height() - 1, _last_row(buffer))
    return first_non_blank(buffer, max(bottom - max(count - 1, 0), top))


def matching_brace(buffer: TextBufferProtocol, pos: Cursor) -> Optional[Cursor]:
    """Jump from the first bracket at or after the cursor on its line to its partner."""

    row, col = pos
    line = buffer.line(row)
    start = next(
        (i for i in range(col, len(line)) if line[i] in _BRACKETS or line[i] in _CLOSERS),
        None,
    )
    if start is None:
        return None
    char = line[start]
    it = buffer.graphemes((row, start))
    depth = 0
    if char in _BRACKETS:
        open_, close = char, _BRACKETS[char]
        for grapheme in it.forward():
            if grapheme == open_:
                depth += 1
            elif grapheme == close:
                depth -= 1
                if depth == 0:
                    it.prev()
                    return it.pos
        return None
    open_, close = _CLOSERS[char], char
    it.next()
    for grapheme in it.backward():
        if grapheme == close:
            depth += 1
        elif grapheme == open_:
            depth -= 1
            if depth == 0:
                return it.pos
    return None


# -- words -----------------------------------------------------------------


def _skip_blanks_forward(it: GraphemeCursor, buffer: TextBufferProtocol) -> None:
    while (grapheme := it.peek_next()) is not None:
        if grapheme == "\n":
            it.next()
            if buffer.line_width(it.pos[0]) == 0:
                return  # an empty line counts as a word
            continue
        if not grapheme.isspace():
            return
        it.next()


def next_word_start(
    buffer: TextBufferProtocol, pos: Cursor, count: int, big: bool = False
) -> Cursor:
    for _ in range(max(count, 1)):
        it = buffer.graphemes(pos)
        cls = char_class(it.peek_next(), big)
        if cls != 0:
            while (g := it.peek_next()) is not None and char_class(g, big) == cls:
                it.next()
        _skip_blanks_forward(it, buffer)
        if it.pos == pos:
            break
        pos = it.pos
    return pos


def next_word_end(
    buffer: TextBufferProtocol, pos: Cursor, count: int, big: bool = False
) -> Optional[Cursor]:
    found: Optional[Cursor] = None
    for _ in range(max(count, 1)):
        it = buffer.graphemes(pos)
        if it.next() is None:
            break
        while (g := it.peek_next()) is not None and g.isspace():
            it.next()
        grapheme = it.peek_next()
        if grapheme is None:
            break
        cls = char_class(grapheme, big)
        it.next()
        while (g := it.peek_next()) is not None and char_class(g, big) == cls:
            it.next()
        it.prev()
        pos = found = it.pos
    return found


def prev_word_start(
    buffer: TextBufferProtocol, pos: Cursor, count: int, big: bool = False
) -> Cursor:
    for _ in range(max(count, 1)):
        it = buffer.graphemes(pos)
        while (g := it.peek_prev()) is not None and g.isspace():
            it.prev()
        grapheme = it.peek_prev()
        if grapheme is not None:
            cls = char_class(grapheme, big)
            while (g := it.peek_prev()) is not None and char_class(g, big) == cls:
                it.prev()
        if it.pos == pos:
            break
        pos = it.pos
    return pos


def prev_word_end(
    buffer: TextBufferProtocol, pos: Cursor, count: int, big: bool = False
) -> Cursor:
    for _ in range(max(count, 1)):
        it = buffer.graphemes(pos)
        cls = char_class(it.peek_next(), big)
        if cls != 0:
            while (g := it.peek_prev()) is not None and char_class(g, big) == cls:
                it.prev()
        while (g := it.peek_prev()) is not None and g.isspace():
            it.prev()
        if it.prev() is None:
            return (0, 0)
        if it.pos == pos:
            break
        pos = it.pos
    return pos


def word_under_cursor(buffer: TextBufferProtocol, pos: Cursor) -> Optional[Span]:
    """Span of the keyword at or after the cursor on its line, as ``*`` uses it."""

    row, col = pos
    line = buffer.line(row)
    start = col
    while start < len(line) and char_class(line[start]) != 1:
        start += 1
    if start >= len(line):
        return None
    if start == col:
        while start > 0 and char_class(line[start - 1]) == 1:
            start -= 1
    end = start
    while end < len(line) and char_class(line[end]) == 1:
        end += 1
    return ((row, start), (row, end))


def word_object(
    buffer: TextBufferProtocol, pos: Cursor, count: int, obj: TxtObj, big: bool = False
) -> Optional[Span]:
    row, col = pos
    line = buffer.line(row)
    if not line:
        return None
    col = min(col, len(line) - 1)

    def cls(i: int) -> int:
        return char_class(line[i], big)

    start = col
    while start > 0 and cls(start - 1) == cls(col):
        start -= 1
    end = col
    for _ in range(max(count, 1)):
        if end >= len(line):
            break
        run = cls(end)
        while end < len(line) and cls(end) == run:
            end += 1
    if obj is TxtObj.A:
        if end < len(line) and line[end].isspace():
            while end < len(line) and line[end].isspace():
                end += 1
        else:
            while start > 0 and line[start - 1].isspace():
                start -= 1
    return ((row, start), (row, end))


# -- sentences and paragraphs ---------------------------------------------


def _sentence_starts(buffer: TextBufferProtocol) -> List[int]:
    text = buffer.text()
    starts = {0}
    for match in _SENTENCE_END.finditer(text):
        index = match.end()
        while index < len(text) and text[index] in " \t":
            index += 1
        starts.add(index)
    offset = 0
    for row in range(buffer.len_lines()):
        width = buffer.line_width(row)
        if width == 0:
            starts.add(offset)
            starts.add(offset + 1)
        offset += width + 1
    return sorted(start for start in starts if start <= len(text))


def next_sentence(buffer: TextBufferProtocol, pos: Cursor, count: int) -> Cursor:
    offset = buffer.char_offset(pos)
    starts = _sentence_starts(buffer)
    for _ in range(max(count, 1)):
        ahead = [start for start in starts if start > offset]
        if not ahead:
            return end_of_buffer(buffer)
        offset = ahead[0]
    return buffer.pos_at(offset)


def prev_sentence(buffer: TextBufferProtocol, pos: Cursor, count: int) -> Cursor:
    offset = buffer.char_offset(pos)
    starts = _sentence_starts(buffer)
    for _ in range(max(count, 1)):
        behind = [start for start in starts if start < offset]
        if not behind:
            return (0, 0)
        offset = behind[-1]
    return buffer.pos_at(offset)


def sentence_object(
    buffer: TextBufferProtocol, pos: Cursor, count: int, obj: TxtObj
) -> Optional[Span]:
    offset = buffer.char_offset(pos)
    starts = _sentence_starts(buffer)
    start = max((s for s in starts if s <= offset), default=0)
    end_pos = next_sentence(buffer, buffer.pos_at(start), count)
    end = buffer.char_offset(end_pos)
    if obj is TxtObj.I:
        text = buffer.text()
        while end > start and text[end - 1].isspace():
            end -= 1
    if end <= start:
        return None
    return (buffer.pos_at(start), buffer.pos_at(end))


def next_paragraph(buffer: TextBufferProtocol, pos: Cursor, count: int) -> Cursor:
    row = pos[0]
    last = _last_row(buffer)
    for _ in range(max(count, 1)):
        while row <= last and _is_blank_row(buffer, row):
            row += 1
        while row <= last and not _is_blank_row(buffer, row):
            row += 1
        if row > last:
            return end_of_buffer(buffer)
    return (row, 0)


def prev_paragraph(buffer: TextBufferProtocol, pos: Cursor, count: int) -> Cursor:
    row = pos[0]
    for _ in range(max(count, 1)):
        while row >= 0 and _is_blank_row(buffer, row):
            row -= 1
        while row >= 0 and not _is_blank_row(buffer, row):
            row -= 1
        if row < 0:
            return (0, 0)
    return (row, 0)


def paragraph_object(
    buffer: TextBufferProtocol, pos: Cursor, count: int, obj: TxtObj
) -> Optional[Span]:
    last = _last_row(buffer)
    first = end = pos[0]
    blank = _is_blank_row(buffer, first)
    while first > 0 and _is_blank_row(buffer, first - 1) == blank:
        first -= 1
    for index in range(max(count, 1)):
        if index:
            if end >= last:
                break
            end += 1
            blank = _is_blank_row(buffer, end)
        while end < last and _is_blank_row(buffer, end + 1) == blank:
            end += 1
    if obj is TxtObj.A:
        while end < last and _is_blank_row(buffer, end + 1):
            end += 1
    if end < last:
        return ((first, 0), (end + 1, 0))
    if first > 0:
        return ((first - 1, buffer.line_width(first - 1)), end_of_buffer(buffer))
    return ((0, 0), end_of_buffer(buffer))


# -- delimited objects -----------------------------------------------------


def _enclosing(text: str, offset: int, open_: str, close: str) -> Optional[Tuple[int, int]]:
    if offset < len(text) and text[offset] == open_:
        start = offset
    else:
        depth = 0
        index = offset - 1
        start = -1
        while index >= 0:
            if text[index] == close:
                depth += 1
            elif text[index] == open_:
                if depth == 0:
                    start = index
                    break
                depth -= 1
            index -= 1
        if start < 0:
            return None
    depth = 0
    for index in range(start + 1, len(text)):
        if text[index] == open_:
            depth += 1
        elif text[index] == close:
            if depth == 0:
                return (start, index)
            depth -= 1
    return None


def bracket_object(
    buffer: TextBufferProtocol, pos: Cursor, count: int, obj: TxtObj, open_: str
) -> Optional[Span]:
    text = buffer.text()
    close = _BRACKETS[open_]
    offset = buffer.char_offset(pos)
    pair = None
    for _ in range(max(count, 1)):
        found = _enclosing(text, offset, open_, close)
        if found is None:
            break
        pair = found
        offset = found[0] - 1
        if offset < 0:
            break
    if pair is None:
        return None
    start, end = pair
    if obj is TxtObj.A:
        return (buffer.pos_at(start), buffer.pos_at(end + 1))
    return (buffer.pos_at(start + 1), buffer.pos_at(end))


def quote_object(
    buffer: TextBufferProtocol, pos: Cursor, obj: TxtObj, quote: str
) -> Optional[Span]:
    row, col = pos
    line = buffer.line(row)
    quotes = [i for i, char in enumerate(line) if char == quote and (i == 0 or line[i - 1] != "\\")]
    pairs = list(zip(quotes[0::2], quotes[1::2]))
    chosen = next((p for p in pairs if p[0] <= col <= p[1]), None)
    if chosen is None:
        chosen = next((p for p in pairs if p[0] > col), None)
    if chosen is None:
        return None
    start, end = chosen
    if obj is TxtObj.I:
        return ((row, start + 1), (row, end))
    stop = end + 1
    while stop < len(line) and line[stop].isspace():
        stop += 1
    return ((row, start), (row, stop))


def tag_object(
    buffer: TextBufferProtocol, pos: Cursor, count: int, obj: TxtObj
) -> Optional[Span]:
    text = buffer.text()
    offset = buffer.char_offset(pos)
    stack: List[Tuple[str, int, int]] = []
    pairs: List[Tuple[int, int, int, int]] = []
    for match in _TAG.finditer(text):
        closing, name, self_closing = match.group(1), match.group(2), match.group(3)
        if self_closing:
            continue
        if not closing:
            stack.append((name, match.start(), match.end()))
            continue
        for depth in range(len(stack) - 1, -1, -1):
            if stack[depth][0] == name:
                _, open_start, open_end = stack[depth]
                del stack[depth:]
                pairs.append((open_start, open_end, match.start(), match.end()))
                break
    around = [p for p in pairs if p[0] <= offset < p[3]]
    if not around:
        return None
    around.sort(key=lambda p: p[3] - p[0])
    open_start, open_end, close_start, close_end = around[min(max(count, 1), len(around)) - 1]
    if obj is TxtObj.A:
        return (buffer.pos_at(open_start), buffer.pos_at(close_end))
    return (buffer.pos_at(open_end), buffer.pos_at(close_start))


# -- edits helpers ---------------------------------------------------------


def line_break_and_leading_space(buffer: TextBufferProtocol, row: int) -> Optional[Span]:
    """Span from the end of ``row`` over the break and the next line's indent."""

    if row >= _last_row(buffer):
        return None
    return ((row, buffer.line_width(row)), first_non_blank(buffer, row + 1))


__all__ = [
    "Span",
    "bracket_object",
    "char_class",
    "end_of_buffer",
    "end_of_line",
    "end_of_line_text",
    "first_non_blank",
    "line_break_and_leading_space",
    "matching_brace",
    "move_left",
    "move_right",
    "move_vertical",
    "next_paragraph",
    "next_sentence",
    "next_word_end",
    "next_word_start",
    "paragraph_object",
    "prev_paragraph",
    "prev_sentence",
    "prev_word_end",
    "prev_word_start",
    "quote_object",
    "screen_bottom",
    "screen_middle",
    "screen_top",
    "sentence_object",
    "tag_object",
    "to_col",
    "to_line",
    "to_line_percent",
    "word_object",
    "word_under_cursor",
]
