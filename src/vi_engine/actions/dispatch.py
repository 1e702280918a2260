"""Dispatch tables mapping a completed command to its handler."""

from __future__ import annotations

from typing import Callable, Dict

from vi_engine.modes.base_mode import ModeContext, ModeResult, Outcome
from vi_engine.parser import MotionKind, Vim, VimKind
from vi_engine.runtime import telemetry

from . import changes, history, motions, scroll, visual

Handler = Callable[[ModeContext, Vim, bool], ModeResult]


def _invalid(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del ctx, vim, repeat
    return ModeResult(consumed=True, status="invalid")


def _change(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    if vim.motion is not None and vim.motion.kind is MotionKind.VISUAL:
        return visual.visual_change(ctx, vim, repeat)
    return changes.change(ctx, vim, repeat)


NORMAL: Dict[VimKind, Handler] = {
    VimKind.INVALID: _invalid,
    VimKind.PARTIAL: motions.incremental_search,
    VimKind.MOVE: motions.move_cursor,
    VimKind.HISTORY: history.navigate,
    VimKind.SCROLL: scroll.scroll,
    VimKind.MARK: history.set_mark,
    VimKind.VISUAL: visual.begin_visual,
    VimKind.UNDO: changes.undo,
    VimKind.REDO: changes.redo,
    VimKind.JOIN_LINES: changes.join_lines,
    VimKind.INSERT: changes.begin_insert,
    VimKind.APPEND: changes.begin_insert,
    VimKind.INSERT_AT_TEXT: changes.begin_insert,
    VimKind.APPEND_AT_END: changes.begin_insert,
    VimKind.APPEND_LINE: changes.begin_insert,
    VimKind.PREPEND_LINE: changes.begin_insert,
    VimKind.DELETE: changes.delete,
    VimKind.CHANGE: _change,
    VimKind.YANK: changes.yank,
    VimKind.PASTE: changes.paste,
    VimKind.REPLACE: changes.replace_chars,
    VimKind.INDENT: changes.indent,
    VimKind.DEDENT: changes.dedent,
}

VISUAL: Dict[VimKind, Handler] = {
    VimKind.INVALID: _invalid,
    VimKind.PARTIAL: motions.incremental_search,
    VimKind.MOVE: visual.visual_move,
    VimKind.VISUAL: visual.switch_visual,
    VimKind.VISUAL_SWAP_LEAD: visual.swap_lead,
    VimKind.VISUAL_SWAP_DIAGONAL: visual.swap_diagonal,
    VimKind.DELETE: visual.visual_delete,
    VimKind.CHANGE: visual.visual_change,
    VimKind.YANK: visual.visual_yank,
}


def _execute(table: Dict[VimKind, Handler], mode: str, ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    handler = table.get(vim.kind, _invalid)
    with telemetry.span(
        "vi::execute",
        logger_name="vi_engine.actions",
        metadata={"mode": mode, "command": vim.kind.value, "count": vim.count},
    ):
        return handler(ctx, vim, repeat)


def _remember(ctx: ModeContext, vim: Vim, result: ModeResult, memo: bool) -> None:
    if memo and result.outcome is Outcome.TEXT_CHANGED:
        ctx.vi.last_command = vim


def execute_normal(ctx: ModeContext, vim: Vim, *, repeat: bool = False) -> ModeResult:
    """Run a Normal-mode command; ``.`` replays the remembered one ``count`` times."""

    if vim.kind is VimKind.REPEAT:
        return _repeat(ctx, vim)
    result = _execute(NORMAL, "normal", ctx, vim, repeat)
    if not repeat:
        _remember(ctx, vim, result, vim.is_normal_memo or vim.is_visual_memo)
    return result


def execute_visual(ctx: ModeContext, vim: Vim) -> ModeResult:
    result = _execute(VISUAL, "visual", ctx, vim, False)
    _remember(ctx, vim, result, vim.is_visual_memo)
    return result


def _repeat(ctx: ModeContext, vim: Vim) -> ModeResult:
    last = ctx.vi.last_command
    if last is None:
        return ModeResult(consumed=True, status="nothing_to_repeat")
    result = ModeResult(consumed=True, status="noop")
    try:
        for _ in range(max(vim.count, 1)):
            result = execute_normal(ctx, last, repeat=True)
    finally:
        ctx.vi.last_command = last
    return result


__all__ = ["Handler", "NORMAL", "VISUAL", "execute_normal", "execute_visual"]
