"""Adapter boundary types shared by the engine and host widgets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Tuple

from .graphemes import GraphemeCursor
from .state import ByteRange, Cursor, Selection


@dataclass(slots=True)
class BufferMirror:
    """Host-friendly snapshot describing the current buffer state."""

    text: str
    cursor: Cursor
    selection: Optional[Selection]
    styles: List[Tuple[ByteRange, int]] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)


class TextBufferProtocol(Protocol):
    """Operations the vi engine needs from an editable text buffer.

    ``TextBuffer`` is the in-package implementation; hosts with their own
    storage can satisfy this protocol instead.
    """

    def cursor(self) -> Cursor: ...

    def set_cursor(self, pos: Cursor) -> None: ...

    def len_lines(self) -> int: ...

    def line(self, row: int) -> str: ...

    def line_width(self, row: int) -> int: ...

    def text(self) -> str: ...

    def graphemes(self, pos: Cursor) -> GraphemeCursor: ...

    def str_slice(self, start: Cursor, end: Cursor) -> str: ...

    def char_offset(self, pos: Cursor) -> int: ...

    def pos_at(self, offset: int) -> Cursor: ...

    def insert_str(self, pos: Cursor, text: str) -> Cursor: ...

    def insert_newline(self) -> None: ...

    def delete_range(self, start: Cursor, end: Cursor) -> str: ...

    def byte_at(self, pos: Cursor) -> int: ...

    def byte_pos(self, byte: int) -> Cursor: ...

    def len_bytes(self) -> int: ...

    def scroll_offset(self) -> int: ...

    def set_scroll_offset(self, row: int) -> None: ...

    def viewport_height(self) -> int: ...

    def add_style(self, span: ByteRange, tag: int) -> None: ...

    def remove_style(self, span: ByteRange, tag: int) -> None: ...

    def remove_tag(self, tag: int) -> None: ...

    def styles_in(
        self, span: ByteRange, tag: Optional[int] = None
    ) -> List[Tuple[ByteRange, int]]: ...


class BufferValidationError(RuntimeError):
    """Raised when adapters or buffers provide out-of-bounds cursor info."""

    def __init__(self, message: str, *, cursor: Cursor | None = None) -> None:
        super().__init__(message)
        self.cursor = cursor
