"""Text buffer collaborator: storage, cursor, styles, registers and undo."""

from .buffer import TextBuffer, Transaction
from .document import BufferDocument
from .graphemes import GraphemeCursor
from .registers import RegisterBank, RegisterValue
from .state import BufferState, ByteRange, Cursor
from .sync import BufferMirror, BufferValidationError, TextBufferProtocol
from .undo import UndoEntry, UndoTimeline
from .validation import clamp_cursor, ensure_cursor

__all__ = [
    "BufferDocument",
    "BufferState",
    "ByteRange",
    "Cursor",
    "GraphemeCursor",
    "RegisterBank",
    "RegisterValue",
    "UndoTimeline",
    "UndoEntry",
    "TextBuffer",
    "TextBufferProtocol",
    "Transaction",
    "BufferMirror",
    "BufferValidationError",
    "clamp_cursor",
    "ensure_cursor",
]
