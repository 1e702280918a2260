"""Change executor: operators, insert sessions and the other text edits.

Every handler takes ``(context, command, repeat)``. ``repeat`` is set when
``.`` replays a remembered command: insert-style commands then re-type the
text recorded in ``ViState.text`` instead of entering Insert mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from vi_engine import keys, query
from vi_engine.buffer import Cursor, TextBuffer
from vi_engine.buffer.registers import UNNAMED
from vi_engine.modes.base_mode import ModeContext, ModeResult, Outcome
from vi_engine.parser import Mark, MarkKind, Motion, MotionKind, Vim, VimKind

from .motions import is_inclusive, resolve_object, resolve_target

CHANGE_START = Mark(MarkKind.CHANGE_START)
CHANGE_END = Mark(MarkKind.CHANGE_END)
INSERT = Mark(MarkKind.INSERT)


@dataclass(frozen=True, slots=True)
class ChangeRange:
    """Text an operator acts on; linewise ranges also remember their rows."""

    start: Cursor
    end: Cursor
    linewise: bool = False
    first_row: int = 0
    last_row: int = 0


def _noop(status: str = "noop") -> ModeResult:
    return ModeResult(consumed=True, status=status)


def line_range(buffer: TextBuffer, first: int, last: int) -> ChangeRange:
    """Whole rows ``first..=last`` including one line break."""

    last = min(last, buffer.len_lines() - 1)
    if last < buffer.len_lines() - 1:
        start, end = (first, 0), (last + 1, 0)
    elif first > 0:
        start, end = (first - 1, buffer.line_width(first - 1)), (last, buffer.line_width(last))
    else:
        start, end = (0, 0), (last, buffer.line_width(last))
    return ChangeRange(start, end, True, first, last)


def change_range(
    ctx: ModeContext, motion: Motion, count: int, operator: VimKind
) -> Optional[ChangeRange]:
    buffer = ctx.buffer
    cursor = buffer.cursor()
    if motion.kind is MotionKind.FULL_LINE:
        return _rows(buffer, cursor[0], cursor[0] + max(count, 1) - 1, operator)
    if motion.is_text_object:
        span = resolve_object(ctx, motion, count)
        if span is None or span[0] == span[1]:
            return None
        return ChangeRange(*span)

    inclusive = is_inclusive(ctx, motion)
    word_start = motion.kind in (MotionKind.NEXT_WORD_START, MotionKind.NEXT_BIGWORD_START)
    if word_start and operator is VimKind.CHANGE and not _blank_at(buffer, cursor):
        big = motion.kind is MotionKind.NEXT_BIGWORD_START
        target = _change_word_end(buffer, cursor, count, big)
        inclusive = True
    else:
        target = resolve_target(ctx, motion, count)
    if target is None:
        return None
    if motion.linewise:
        first, last = sorted((cursor[0], target[0]))
        return _rows(buffer, first, last, operator)

    start, end = sorted((cursor, target))
    if inclusive:
        end = (end[0], min(end[1] + 1, buffer.line_width(end[0])))
    elif end[0] > start[0] and end[1] <= query.first_non_blank(buffer, end[0])[1]:
        # an exclusive motion ending at the start of a line stops at the previous line end
        end = (end[0] - 1, buffer.line_width(end[0] - 1))
    if start >= end:
        return None
    return ChangeRange(start, end)


def _rows(buffer: TextBuffer, first: int, last: int, operator: VimKind) -> Optional[ChangeRange]:
    rng = line_range(buffer, first, last)
    # a lone empty line leaves nothing to delete; yy and cc still act on it
    if operator is VimKind.DELETE and rng.start == rng.end:
        return None
    return rng


def _blank_at(buffer: TextBuffer, pos: Cursor) -> bool:
    line = buffer.line(pos[0])
    return pos[1] >= len(line) or line[pos[1]].isspace()


def _change_word_end(buffer: TextBuffer, cursor: Cursor, count: int, big: bool) -> Cursor:
    # `cw` stops at the end of the word under the cursor, even a one-letter one
    row, col = cursor
    line = buffer.line(row)
    end = cursor
    if col + 1 < len(line) and query.char_class(line[col + 1], big) == query.char_class(line[col], big):
        end = query.next_word_end(buffer, cursor, 1, big) or cursor
    if count > 1:
        end = query.next_word_end(buffer, end, count - 1, big) or end
    return end


def register_text(buffer: TextBuffer, rng: ChangeRange) -> str:
    if rng.linewise:
        rows = (buffer.line(row) for row in range(rng.first_row, rng.last_row + 1))
        return "\n".join(rows) + "\n"
    return buffer.str_slice(rng.start, rng.end)


def _yank(ctx: ModeContext, vim: Vim, rng: ChangeRange) -> None:
    ctx.registers.yank_to(
        vim.register or UNNAMED,
        register_text(ctx.buffer, rng),
        register_type="line" if rng.linewise else "character",
    )


def type_text(buffer: TextBuffer, text: str) -> None:
    """Re-type recorded insert-mode keys at the cursor."""

    for char in text:
        if char == "\n":
            buffer.insert_newline()
        elif char == "\t":
            buffer.insert_tab()
        elif char == keys.BS:
            buffer.delete_prev_char()
        elif char == keys.DEL:
            buffer.delete_next_char()
        else:
            buffer.insert_char(char)


# -- operators -------------------------------------------------------------


def delete(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del repeat
    if vim.motion is None:
        return _noop("invalid")
    buffer, vi = ctx.buffer, ctx.vi
    rng = change_range(ctx, vim.motion, vim.count, VimKind.DELETE)
    if rng is None:
        return _noop()
    vi.marks.set(CHANGE_START, rng.start)
    _yank(ctx, vim, rng)
    with buffer.transaction("delete"):
        buffer.delete_range(rng.start, rng.end)
    if rng.linewise:
        row = min(rng.first_row, buffer.len_lines() - 1)
        buffer.set_cursor_unchecked(query.first_non_blank(buffer, row))
    else:
        buffer.set_cursor_unchecked(rng.start)
    vi.marks.set(CHANGE_END, buffer.cursor())
    vi.request_pull()
    return ModeResult(consumed=True, status="delete", outcome=Outcome.TEXT_CHANGED)


def change(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    if vim.motion is None:
        return _noop("invalid")
    buffer, vi = ctx.buffer, ctx.vi
    rng = change_range(ctx, vim.motion, vim.count, VimKind.CHANGE)
    if rng is None:
        return _noop()
    vi.marks.set(CHANGE_START, buffer.cursor())
    _yank(ctx, vim, rng)
    buffer.begin_group("change")
    if rng.linewise:
        # keep one empty line to type into
        last = rng.last_row
        buffer.delete_range((rng.first_row, 0), (last, buffer.line_width(last)))
        buffer.set_cursor_unchecked((rng.first_row, 0))
    else:
        buffer.delete_range(rng.start, rng.end)
        buffer.set_cursor_unchecked(rng.start)
    vi.insert_count = 1
    return _enter_or_replay(ctx, VimKind.CHANGE, repeat)


def yank(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del repeat
    if vim.motion is None:
        return _noop("invalid")
    buffer = ctx.buffer
    rng = change_range(ctx, vim.motion, vim.count, VimKind.YANK)
    if rng is None:
        return _noop()
    _yank(ctx, vim, rng)
    if rng.linewise:
        if rng.first_row != buffer.cursor()[0]:
            buffer.set_cursor_unchecked(query.first_non_blank(buffer, rng.first_row))
    else:
        buffer.set_cursor_unchecked(rng.start)
    return ModeResult(consumed=True, status="yank", outcome=Outcome.CHANGED)


# -- insert sessions -------------------------------------------------------


def _open_below(buffer: TextBuffer) -> None:
    row = buffer.cursor()[0]
    buffer.set_cursor_unchecked((row, buffer.line_width(row)))
    buffer.insert_newline()


def _open_above(buffer: TextBuffer) -> None:
    row = buffer.cursor()[0]
    buffer.set_cursor_unchecked((row, 0))
    buffer.insert_newline()
    buffer.set_cursor_unchecked((row, 0))


_PREPARE: dict[VimKind, Callable[[TextBuffer], None]] = {
    VimKind.INSERT: lambda buffer: None,
    VimKind.APPEND: lambda buffer: buffer.set_cursor_unchecked(
        query.move_right(buffer, buffer.cursor(), 1)
    ),
    VimKind.INSERT_AT_TEXT: lambda buffer: buffer.set_cursor_unchecked(
        query.first_non_blank(buffer, buffer.cursor()[0])
    ),
    VimKind.APPEND_AT_END: lambda buffer: buffer.set_cursor_unchecked(
        query.end_of_line(buffer, buffer.cursor())
    ),
    VimKind.APPEND_LINE: _open_below,
    VimKind.PREPEND_LINE: _open_above,
}


def begin_insert(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    """``i a I A o O``: position the cursor and start an insert session."""

    buffer, vi = ctx.buffer, ctx.vi
    vi.marks.set(CHANGE_START, buffer.cursor())
    buffer.begin_group(vim.kind.value)
    _PREPARE[vim.kind](buffer)
    vi.insert_count = max(vim.count, 1)
    return _enter_or_replay(ctx, vim.kind, repeat)


def _enter_or_replay(ctx: ModeContext, kind: VimKind, repeat: bool) -> ModeResult:
    vi = ctx.vi
    vi.insert_kind = kind
    if repeat:
        type_text(ctx.buffer, vi.text)
        end_insert(ctx)
        return ModeResult(consumed=True, status="repeat", outcome=Outcome.TEXT_CHANGED)
    vi.text = ""
    return ModeResult(
        consumed=True, switch_to="insert", status="insert", outcome=Outcome.TEXT_CHANGED
    )


def _replay_once(buffer: TextBuffer, kind: VimKind, text: str) -> None:
    if kind is VimKind.APPEND_LINE:
        _open_below(buffer)
    elif kind is VimKind.PREPEND_LINE:
        _open_above(buffer)
    type_text(buffer, text)


def end_insert(ctx: ModeContext) -> None:
    """Finish an insert session.

    The typed text is replayed ``count - 1`` more times, the ``^`` and
    ``]`` marks land where typing stopped and the undo group is closed.
    A failure while replaying propagates without rolling back what was
    already typed.
    """

    buffer, vi = ctx.buffer, ctx.vi
    try:
        for _ in range(vi.insert_count - 1):
            _replay_once(buffer, vi.insert_kind, vi.text)
        cursor = buffer.cursor()
        vi.marks.set(INSERT, cursor)
        vi.marks.set(CHANGE_END, cursor)
    finally:
        buffer.end_group()
        vi.insert_count = 1
        vi.request_pull()
    if cursor[1] > 0:
        buffer.set_cursor_unchecked((cursor[0], cursor[1] - 1))


def record_key(ctx: ModeContext, char: str) -> None:
    """Apply one insert-mode key to the buffer and remember it for replay."""

    ctx.vi.text += char
    type_text(ctx.buffer, char)
    ctx.vi.request_pull()


# -- other edits -----------------------------------------------------------


def paste(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del repeat
    buffer, vi = ctx.buffer, ctx.vi
    value = ctx.registers.get(vim.register or UNNAMED)
    if not value.text:
        return _noop("empty_register")
    count = max(vim.count, 1)
    row, col = buffer.cursor()
    vi.marks.set(CHANGE_START, (row, col))
    with buffer.transaction("paste"):
        if value.type == "block":
            target = _paste_block(buffer, value.text, count, vim.before)
        elif value.type == "line" or value.text.endswith("\n"):
            body = value.text if value.text.endswith("\n") else value.text + "\n"
            body *= count
            if vim.before:
                buffer.insert_str((row, 0), body)
                target = query.first_non_blank(buffer, row)
            elif row < buffer.len_lines() - 1:
                buffer.insert_str((row + 1, 0), body)
                target = query.first_non_blank(buffer, row + 1)
            else:
                buffer.insert_str((row, buffer.line_width(row)), "\n" + body[:-1])
                target = query.first_non_blank(buffer, row + 1)
        else:
            pos = (row, col) if vim.before else query.move_right(buffer, (row, col), 1)
            end = buffer.insert_str(pos, value.text * count)
            target = buffer.pos_at(max(buffer.char_offset(end) - 1, 0))
    buffer.set_cursor_unchecked(target)
    vi.marks.set(CHANGE_END, buffer.cursor())
    vi.request_pull()
    return ModeResult(consumed=True, status="paste", outcome=Outcome.TEXT_CHANGED)


def _paste_block(buffer: TextBuffer, text: str, count: int, before: bool) -> Cursor:
    row, col = buffer.cursor()
    if not before and buffer.line_width(row) > 0:
        col += 1
    for offset, piece in enumerate(text.split("\n")):
        target = row + offset
        if target >= buffer.len_lines():
            last = buffer.len_lines() - 1
            buffer.insert_str((last, buffer.line_width(last)), "\n")
        width = buffer.line_width(target)
        if width < col:
            buffer.insert_str((target, width), " " * (col - width))
        buffer.insert_str((target, col), piece * count)
    return (row, col)


def replace_chars(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del repeat
    buffer, vi = ctx.buffer, ctx.vi
    row, col = buffer.cursor()
    count = max(vim.count, 1)
    if not vim.char or col + count > buffer.line_width(row):
        return _noop()
    vi.marks.set(CHANGE_START, (row, col))
    with buffer.transaction("replace"):
        buffer.delete_range((row, col), (row, col + count))
        if vim.char == "\n":
            buffer.insert_str((row, col), "\n")
            target = (row + 1, 0)
        else:
            buffer.insert_str((row, col), vim.char * count)
            target = (row, col + count - 1)
    buffer.set_cursor_unchecked(target)
    vi.marks.set(CHANGE_END, buffer.cursor())
    vi.request_pull()
    return ModeResult(consumed=True, status="replace", outcome=Outcome.TEXT_CHANGED)


def join_lines(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del repeat
    buffer, vi = ctx.buffer, ctx.vi
    row = buffer.cursor()[0]
    span = query.line_break_and_leading_space(buffer, row)
    if span is None:
        return _noop()
    vi.marks.set(CHANGE_START, buffer.cursor())
    join_col = buffer.line_width(row)
    with buffer.transaction("join"):
        for _ in range(max(vim.count - 1, 1)):
            span = query.line_break_and_leading_space(buffer, row)
            if span is None:
                break
            left = buffer.line(row)
            right = buffer.line(row + 1).lstrip()
            join_col = buffer.line_width(row)
            buffer.delete_range(*span)
            if left and right and not left.endswith(" ") and not right.startswith(")"):
                buffer.insert_str((row, join_col), " ")
    buffer.set_cursor_unchecked((row, join_col))
    vi.marks.set(CHANGE_END, buffer.cursor())
    vi.request_pull()
    return ModeResult(consumed=True, status="join", outcome=Outcome.TEXT_CHANGED)


def undo(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del repeat
    changed = False
    for _ in range(max(vim.count, 1)):
        changed = ctx.buffer.undo() or changed
    if not changed:
        return _noop("nothing_to_undo")
    ctx.vi.request_pull()
    return ModeResult(consumed=True, status="undo", outcome=Outcome.TEXT_CHANGED)


def redo(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del repeat
    changed = False
    for _ in range(max(vim.count, 1)):
        changed = ctx.buffer.redo() or changed
    if not changed:
        return _noop("nothing_to_redo")
    ctx.vi.request_pull()
    return ModeResult(consumed=True, status="redo", outcome=Outcome.TEXT_CHANGED)


def _shift(ctx: ModeContext, vim: Vim, label: str, edit: Callable[[TextBuffer, int, int], None]) -> ModeResult:
    buffer, vi = ctx.buffer, ctx.vi
    row = buffer.cursor()[0]
    last = min(row + max(vim.count, 1) - 1, buffer.len_lines() - 1)
    start = buffer.cursor()
    version = buffer.version
    with buffer.transaction(label):
        for target in range(row, last + 1):
            edit(buffer, target, ctx.config.shiftwidth)
    if buffer.version == version:
        return _noop()
    vi.marks.set(CHANGE_START, start)
    buffer.set_cursor_unchecked(query.first_non_blank(buffer, row))
    vi.marks.set(CHANGE_END, buffer.cursor())
    vi.request_pull()
    return ModeResult(consumed=True, status=label, outcome=Outcome.TEXT_CHANGED)


def _indent_row(buffer: TextBuffer, row: int, width: int) -> None:
    if buffer.line_width(row):
        buffer.insert_str((row, 0), " " * width)


def _dedent_row(buffer: TextBuffer, row: int, width: int) -> None:
    line = buffer.line(row)
    if line.startswith("\t"):
        remove = 1
    else:
        remove = min(width, len(line) - len(line.lstrip(" ")))
    if remove:
        buffer.delete_range((row, 0), (row, remove))


def indent(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del repeat
    return _shift(ctx, vim, "indent", _indent_row)


def dedent(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del repeat
    return _shift(ctx, vim, "dedent", _dedent_row)


__all__ = [
    "ChangeRange",
    "begin_insert",
    "change",
    "change_range",
    "dedent",
    "delete",
    "end_insert",
    "indent",
    "join_lines",
    "line_range",
    "paste",
    "record_key",
    "redo",
    "register_text",
    "replace_chars",
    "type_text",
    "undo",
    "yank",
]
