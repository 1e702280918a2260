"""Text buffer façade combining document, cursor state, styles, registers and undo."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import ContextManager, List, Optional, Tuple

from vi_engine.config import EngineConfig
from vi_engine.runtime import telemetry

from .document import BufferDocument
from .graphemes import GraphemeCursor
from .registers import RegisterBank
from .state import BufferState, ByteRange, Cursor, Selection
from .sync import BufferMirror
from .undo import StyleSpan, UndoEntry, UndoTimeline
from .validation import clamp_cursor, ensure_cursor


@dataclass(slots=True)
class _Snapshot:
    text: str
    cursor: Cursor
    styles: List[StyleSpan]


class TextBuffer:
    """Editable text with a cursor, a viewport, tagged style ranges and undo.

    Positions are ``(row, col)`` with ``col`` counted in graphemes and allowed
    to equal the line width. Style ranges are half-open UTF-8 byte spans keyed
    by an integer tag and are shifted along with every edit.
    """

    def __init__(
        self,
        *,
        name: str = "default",
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
        registers: Optional[RegisterBank] = None,
        history: Optional[UndoTimeline] = None,
        config: Optional[EngineConfig] = None,
    ) -> None:
        self.name = name
        self.config = config or EngineConfig()
        self.document = document or BufferDocument()
        self.state = state or BufferState(viewport_height=self.config.viewport_height)
        self.registers = registers or RegisterBank()
        self.history = history or UndoTimeline()
        self._styles: List[StyleSpan] = []
        self._depth = 0
        self._groups: List[Transaction] = []

    @classmethod
    def from_text(
        cls,
        text: str,
        *,
        name: str = "default",
        config: Optional[EngineConfig] = None,
    ) -> "TextBuffer":
        return cls(name=name, document=BufferDocument.from_text(text), config=config)

    # -- cursor ----------------------------------------------------------

    def cursor(self) -> Cursor:
        return self.state.cursor

    def set_cursor(self, pos: Cursor) -> None:
        self.state.set_cursor(*ensure_cursor(self.document, pos))

    def clamp(self, pos: Cursor) -> Cursor:
        return clamp_cursor(self.document, pos)

    # -- reading ---------------------------------------------------------

    @property
    def version(self) -> int:
        return self.document.version

    def len_lines(self) -> int:
        return self.document.line_count

    def line(self, row: int) -> str:
        return self.document.get_line(row)

    def line_width(self, row: int) -> int:
        return self.document.line_width(row)

    def text(self) -> str:
        return self.document.text()

    def graphemes(self, pos: Cursor) -> GraphemeCursor:
        return GraphemeCursor(self.document.snapshot(), ensure_cursor(self.document, pos))

    def str_slice(self, start: Cursor, end: Cursor) -> str:
        start, end = self._ordered(start, end)
        if start[0] == end[0]:
            return self.document.get_line(start[0])[start[1] : end[1]]
        parts = [self.document.get_line(start[0])[start[1] :]]
        for row in range(start[0] + 1, end[0]):
            parts.append(self.document.get_line(row))
        parts.append(self.document.get_line(end[0])[: end[1]])
        return "\n".join(parts)

    def char_offset(self, pos: Cursor) -> int:
        return self.document.char_offset(*ensure_cursor(self.document, pos))

    def pos_at(self, offset: int) -> Cursor:
        return self.document.pos_at_char(offset)

    def byte_at(self, pos: Cursor) -> int:
        return self.document.byte_at(*ensure_cursor(self.document, pos))

    def byte_pos(self, byte: int) -> Cursor:
        return self.document.pos_at_byte(byte)

    def len_bytes(self) -> int:
        return self.document.len_bytes

    # -- viewport --------------------------------------------------------

    def scroll_offset(self) -> int:
        return self.state.scroll_offset

    def set_scroll_offset(self, row: int) -> None:
        self.state.scroll_offset = max(0, min(row, self.document.line_count - 1))

    def viewport_height(self) -> int:
        return self.state.viewport_height

    def set_viewport_height(self, height: int) -> None:
        self.state.viewport_height = max(1, height)

    def scroll_cursor_to_visible(self) -> None:
        row = self.state.cursor[0]
        offset = self.state.scroll_offset
        height = self.state.viewport_height
        if row < offset:
            self.state.scroll_offset = row
        elif row >= offset + height:
            self.state.scroll_offset = row - height + 1

    # -- styles ----------------------------------------------------------

    def add_style(self, span: ByteRange, tag: int) -> None:
        start, end = span
        if start < end:
            self._styles.append(((start, end), tag))

    def remove_style(self, span: ByteRange, tag: int) -> None:
        self._styles = [item for item in self._styles if item != (span, tag)]

    def remove_tag(self, tag: int) -> None:
        self._styles = [item for item in self._styles if item[1] != tag]

    def styles_in(
        self, span: ByteRange, tag: Optional[int] = None
    ) -> List[StyleSpan]:
        """Return the style ranges overlapping ``span`` in insertion order."""

        lo, hi = span
        found = []
        for (start, end), style in self._styles:
            if tag is not None and style != tag:
                continue
            if start < hi and end > lo:
                found.append(((start, end), style))
        return found

    def styles(self) -> List[StyleSpan]:
        return list(self._styles)

    # -- editing ---------------------------------------------------------

    def transaction(self, label: str) -> "Transaction":
        return Transaction(self, label)

    def begin_group(self, label: str) -> None:
        """Open a long-lived undo group, e.g. for an insert session."""

        group = Transaction(self, label, profile=False)
        group.__enter__()
        self._groups.append(group)

    def end_group(self) -> None:
        if self._groups:
            self._groups.pop().__exit__(None, None, None)

    def insert_str(self, pos: Cursor, text: str) -> Cursor:
        """Insert ``text`` at ``pos`` and return the position right after it."""

        pos = ensure_cursor(self.document, pos)
        start = self.document.char_offset(*pos)
        self._replace(pos, pos, text, label="insert")
        return self.document.pos_at_char(start + len(text))

    def insert_char(self, char: str) -> None:
        self.set_cursor_unchecked(self.insert_str(self.state.cursor, char))

    def insert_newline(self) -> None:
        self.insert_char("\n")

    def insert_tab(self) -> None:
        self.set_cursor_unchecked(self.insert_str(self.state.cursor, self.config.tab_text))

    def delete_range(self, start: Cursor, end: Cursor) -> str:
        """Remove the text between two positions and return it."""

        start, end = self._ordered(
            ensure_cursor(self.document, start), ensure_cursor(self.document, end)
        )
        removed = self.str_slice(start, end)
        if removed:
            self._replace(start, end, "", label="delete")
        return removed

    def delete_prev_char(self) -> bool:
        row, col = self.state.cursor
        if col > 0:
            self.delete_range((row, col - 1), (row, col))
        elif row > 0:
            self.delete_range((row - 1, self.document.line_width(row - 1)), (row, 0))
        else:
            return False
        return True

    def delete_next_char(self) -> bool:
        row, col = self.state.cursor
        if col < self.document.line_width(row):
            self.delete_range((row, col), (row, col + 1))
        elif row + 1 < self.document.line_count:
            self.delete_range((row, col), (row + 1, 0))
        else:
            return False
        return True

    def set_cursor_unchecked(self, pos: Cursor) -> None:
        self.state.set_cursor(*clamp_cursor(self.document, pos))

    def undo(self) -> bool:
        entry = self.history.undo()
        if entry is None:
            return False
        self._restore(entry.before_text, entry.cursor_before, entry.styles_before)
        return True

    def redo(self) -> bool:
        entry = self.history.redo()
        if entry is None:
            return False
        self._restore(entry.after_text, entry.cursor_after, entry.styles_after)
        return True

    def mirror(
        self,
        *,
        selection: Optional[Selection] = None,
        attributes: Optional[dict[str, str]] = None,
    ) -> BufferMirror:
        return BufferMirror(
            text=self.document.text(),
            cursor=self.state.cursor,
            selection=selection,
            styles=list(self._styles),
            attributes=dict(attributes or {}),
        )

    # -- internals -------------------------------------------------------

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(self.document.text(), self.state.cursor, list(self._styles))

    def _restore(self, text: str, cursor: Cursor, styles: List[StyleSpan]) -> None:
        self.document = self.document.update_lines(
            0, self.document.line_count, text.split("\n")
        )
        self._styles = list(styles)
        self.state.set_cursor(*clamp_cursor(self.document, cursor))
        self.state.last_change_tick = self.document.version

    def _replace(self, start: Cursor, end: Cursor, text: str, *, label: str) -> None:
        with Transaction(self, label):
            doc = self.document
            first = doc.char_offset(*start)
            last = doc.char_offset(*end)
            cursor_offset = doc.char_offset(*self.state.cursor)
            byte_start = doc.byte_at(*start)
            byte_end = doc.byte_at(*end)
            inserted = len(text.encode("utf-8"))

            head = doc.get_line(start[0])[: start[1]]
            tail = doc.get_line(end[0])[end[1] :]
            self.document = doc.update_lines(
                start[0], end[0] + 1, (head + text + tail).split("\n")
            )

            self._styles = _shift_styles(self._styles, byte_start, byte_end, inserted)
            if cursor_offset >= last:
                cursor_offset += len(text) - (last - first)
            elif cursor_offset > first:
                cursor_offset = first
            self.state.set_cursor(*self.document.pos_at_char(cursor_offset))
            self.state.last_change_tick = self.document.version

    @staticmethod
    def _ordered(start: Cursor, end: Cursor) -> Tuple[Cursor, Cursor]:
        return (start, end) if start <= end else (end, start)


class Transaction(AbstractContextManager["Transaction"]):
    """Groups buffer edits into one undo entry, profiled as ``buffer::<label>``.

    Transactions nest; only the outermost one records history.
    """

    def __init__(self, buffer: TextBuffer, label: str, *, profile: bool = True) -> None:
        self.buffer = buffer
        self.label = label
        self.profile = profile
        self._span_cm: Optional[ContextManager[object]] = None
        self._before: Optional[_Snapshot] = None

    def __enter__(self) -> "Transaction":
        if self.buffer._depth == 0:
            self._before = self.buffer._snapshot()
            if self.profile:
                self._span_cm = telemetry.span(
                    name=f"buffer::{self.label}",
                    component=True,
                    metadata={"buffer": self.buffer.name},
                )
                self._span_cm.__enter__()
        self.buffer._depth += 1
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.buffer._depth -= 1
        if self._before is not None:
            self.commit(self._before, self.buffer._snapshot())
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False

    def commit(self, before: _Snapshot, after: _Snapshot) -> None:
        if before.text == after.text:
            return
        entry = UndoEntry(
            label=self.label,
            before_text=before.text,
            after_text=after.text,
            cursor_before=before.cursor,
            cursor_after=after.cursor,
            styles_before=before.styles,
            styles_after=after.styles,
        )
        self.buffer.history.push(entry)


def _shift_offset(offset: int, start: int, end: int, inserted: int) -> int:
    if offset <= start:
        return offset
    if offset >= end:
        return offset - (end - start) + inserted
    return start


def _shift_styles(
    styles: List[StyleSpan], start: int, end: int, inserted: int
) -> List[StyleSpan]:
    shifted = []
    for (lo, hi), tag in styles:
        new_lo = _shift_offset(lo, start, end, inserted)
        new_hi = _shift_offset(hi, start, end, inserted)
        if new_lo < new_hi:
            shifted.append(((new_lo, new_hi), tag))
    return shifted
