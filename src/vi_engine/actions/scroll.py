"""Viewport scrolling: ``Ctrl-Y``/``Ctrl-E``/``Ctrl-B``/``Ctrl-F`` and ``z``."""

from __future__ import annotations

from vi_engine.buffer import TextBuffer
from vi_engine.modes.base_mode import ModeContext, ModeResult, Outcome
from vi_engine.parser import Scrolling, Vim


def _keep_cursor_in_view(buffer: TextBuffer) -> None:
    row, col = buffer.cursor()
    top = buffer.scroll_offset()
    bottom = min(top + buffer.viewport_height() - 1, buffer.len_lines() - 1)
    target = max(top, min(row, bottom))
    if target != row:
        buffer.set_cursor_unchecked((target, col))


def scroll(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del repeat
    buffer = ctx.buffer
    count = max(vim.count, 1)
    row = buffer.cursor()[0]
    offset = buffer.scroll_offset()
    height = buffer.viewport_height()
    page = max(height - 2, 1)
    kind = vim.scroll

    if kind is Scrolling.UP:
        buffer.set_scroll_offset(offset - count)
    elif kind is Scrolling.DOWN:
        buffer.set_scroll_offset(offset + count)
    elif kind is Scrolling.PAGE_UP:
        buffer.set_scroll_offset(offset - count * page)
        bottom = min(buffer.scroll_offset() + height - 1, buffer.len_lines() - 1)
        buffer.set_cursor_unchecked((bottom, buffer.cursor()[1]))
    elif kind is Scrolling.PAGE_DOWN:
        buffer.set_scroll_offset(offset + count * page)
        buffer.set_cursor_unchecked((buffer.scroll_offset(), buffer.cursor()[1]))
    elif kind is Scrolling.MIDDLE_OF_SCREEN:
        buffer.set_scroll_offset(max(row - height // 2, 0))
    elif kind is Scrolling.TOP_OF_SCREEN:
        buffer.set_scroll_offset(row)
    elif kind is Scrolling.BOTTOM_OF_SCREEN:
        buffer.set_scroll_offset(max(row - height + 1, 0))
    else:
        return ModeResult(consumed=True, status="invalid")
    _keep_cursor_in_view(buffer)
    return ModeResult(consumed=True, status="scroll", outcome=Outcome.CHANGED)


__all__ = ["scroll"]
