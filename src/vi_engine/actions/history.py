"""Marks plus jump-list and change-list navigation."""

from __future__ import annotations

from vi_engine.modes.base_mode import ModeContext, ModeResult, Outcome
from vi_engine.parser import HistoryKind, Vim


def set_mark(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del repeat
    if vim.mark is None:
        return ModeResult(consumed=True, status="invalid")
    ctx.vi.marks.set(vim.mark, ctx.buffer.cursor())
    return ModeResult(consumed=True, status="mark")


def navigate(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    """``Ctrl-O``/``Ctrl-I`` walk the jump list, ``g;``/``g,`` the change list.

    Reaching the newest edge of a list is a valid result that leaves the
    cursor where it is.
    """

    del repeat
    marks = ctx.vi.marks
    count = max(vim.count, 1)
    kind = vim.history
    if kind is HistoryKind.PREV_JUMP:
        target = marks.navigate_jump(-count)
    elif kind is HistoryKind.NEXT_JUMP:
        target = marks.navigate_jump(count)
    elif kind is HistoryKind.PREV_CHANGE:
        target = marks.navigate_change(-count)
    elif kind is HistoryKind.NEXT_CHANGE:
        target = marks.navigate_change(count)
    else:
        return ModeResult(consumed=True, status="invalid")
    if target is None:
        return ModeResult(consumed=True, status="history_edge")
    ctx.buffer.set_cursor_unchecked(target)
    return ModeResult(consumed=True, status="history", outcome=Outcome.CHANGED)


__all__ = ["navigate", "set_mark"]
