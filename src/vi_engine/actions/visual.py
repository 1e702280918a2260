"""Actions dedicated to Visual mode selection management."""

from __future__ import annotations

from typing import List, Tuple

from vi_engine import query
from vi_engine.buffer import Cursor, TextBuffer
from vi_engine.buffer.registers import UNNAMED
from vi_engine.modes.base_mode import ModeContext, ModeResult, Outcome
from vi_engine.parser import Mark, MarkKind, Vim, VimKind
from vi_engine.state import VisualState

from .changes import CHANGE_END, CHANGE_START, end_insert, line_range, type_text
from .motions import resolve_object, resolve_target

Span = Tuple[Cursor, Cursor]


def selection_spans(buffer: TextBuffer, visual: VisualState) -> List[Span]:
    """Character spans covered by the selection, one per row in block mode.

    Charwise selections include the character under the lead.
    """

    (r0, c0), (r1, c1) = visual.ordered
    if visual.line:
        return [((r0, 0), (r1, buffer.line_width(r1)))]
    if visual.block:
        left = min(visual.anchor[1], visual.lead[1])
        right = max(visual.anchor[1], visual.lead[1]) + 1
        spans = []
        for row in range(r0, r1 + 1):
            width = buffer.line_width(row)
            spans.append(((row, min(left, width)), (row, min(right, width))))
        return spans
    return [((r0, c0), (r1, min(c1 + 1, buffer.line_width(r1))))]


def refresh_selection(ctx: ModeContext) -> None:
    buffer = ctx.buffer
    visual = ctx.vi.visual
    visual.ranges.replace(
        [
            (buffer.byte_at(start), buffer.byte_at(end))
            for start, end in selection_spans(buffer, visual)
        ]
    )
    ctx.bus.emit("visual.selection", {"anchor": visual.anchor, "cursor": visual.lead})


def begin_visual(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    """``v``/``V``/``Ctrl-V`` from Normal mode: anchor and lead at the cursor."""

    del repeat
    visual = ctx.vi.visual
    cursor = ctx.buffer.cursor()
    visual.block = vim.block
    visual.line = vim.line
    visual.anchor = cursor
    visual.lead = cursor
    refresh_selection(ctx)
    return ModeResult(consumed=True, switch_to="visual", status="visual", outcome=Outcome.CHANGED)


def switch_visual(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    """``v``/``V``/``Ctrl-V`` inside Visual mode: change flavour or leave."""

    del repeat
    visual = ctx.vi.visual
    if visual.block == vim.block and visual.line == vim.line:
        return exit_visual(ctx)
    visual.block = vim.block
    visual.line = vim.line
    refresh_selection(ctx)
    return ModeResult(consumed=True, status="visual", outcome=Outcome.CHANGED)


def exit_visual(ctx: ModeContext) -> ModeResult:
    visual = ctx.vi.visual
    ctx.vi.marks.set(Mark(MarkKind.VISUAL_ANCHOR), visual.anchor)
    ctx.vi.marks.set(Mark(MarkKind.VISUAL_LEAD), visual.lead)
    visual.clear()
    return ModeResult(consumed=True, switch_to="normal", status="exit_visual", outcome=Outcome.CHANGED)


def visual_move(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del repeat
    motion = vim.motion
    if motion is None:
        return ModeResult(consumed=True, status="invalid")
    buffer = ctx.buffer
    visual = ctx.vi.visual
    if motion.is_text_object:
        span = resolve_object(ctx, motion, vim.count)
        if span is None:
            return ModeResult(consumed=True, status="no_motion")
        start, end = span
        visual.anchor = start
        visual.lead = buffer.pos_at(max(buffer.char_offset(end) - 1, buffer.char_offset(start)))
    else:
        target = resolve_target(ctx, motion, vim.count)
        if target is None:
            return ModeResult(consumed=True, status="no_motion")
        visual.lead = target
    buffer.set_cursor_unchecked(visual.lead)
    refresh_selection(ctx)
    return ModeResult(consumed=True, status="visual_select", outcome=Outcome.CHANGED)


def swap_lead(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del vim, repeat
    visual = ctx.vi.visual
    visual.anchor, visual.lead = visual.lead, visual.anchor
    ctx.buffer.set_cursor_unchecked(visual.lead)
    refresh_selection(ctx)
    return ModeResult(consumed=True, status="visual_select", outcome=Outcome.CHANGED)


def swap_diagonal(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    """``O``: in block mode jump to the other corner on the same row."""

    visual = ctx.vi.visual
    if not visual.block:
        return swap_lead(ctx, vim, repeat)
    (ar, ac), (lr, lc) = visual.anchor, visual.lead
    visual.anchor, visual.lead = (ar, lc), (lr, ac)
    ctx.buffer.set_cursor_unchecked(ctx.buffer.clamp(visual.lead))
    refresh_selection(ctx)
    return ModeResult(consumed=True, status="visual_select", outcome=Outcome.CHANGED)


def _selected_text(buffer: TextBuffer, visual: VisualState) -> Tuple[str, str]:
    if visual.line:
        (r0, _), (r1, _) = visual.ordered
        rows = (buffer.line(row) for row in range(r0, r1 + 1))
        return "\n".join(rows) + "\n", "line"
    spans = selection_spans(buffer, visual)
    if visual.block:
        return "\n".join(buffer.str_slice(s, e) for s, e in spans), "block"
    return buffer.str_slice(*spans[0]), "character"


def _remove_selection(ctx: ModeContext, *, keep_line: bool) -> Cursor:
    """Delete the selected text and return where the cursor belongs."""

    buffer = ctx.buffer
    visual = ctx.vi.visual
    (r0, _), (r1, _) = visual.ordered
    if visual.line:
        if keep_line:
            buffer.delete_range((r0, 0), (r1, buffer.line_width(r1)))
            return (r0, 0)
        rng = line_range(buffer, r0, r1)
        buffer.delete_range(rng.start, rng.end)
        return query.first_non_blank(buffer, min(r0, buffer.len_lines() - 1))
    spans = selection_spans(buffer, visual)
    for start, end in reversed(spans):
        buffer.delete_range(start, end)
    return spans[0][0]


def _extent(visual: VisualState) -> Tuple[int, int, bool, bool]:
    (r0, c0), (r1, c1) = visual.ordered
    if visual.block:
        cols = abs(visual.lead[1] - visual.anchor[1])
    elif r0 == r1:
        cols = c1 - c0
    else:
        cols = c1
    return (r1 - r0 + 1, cols, visual.block, visual.line)


def _restore_extent(ctx: ModeContext) -> bool:
    """Rebuild a selection of the last changed extent at the cursor."""

    extent = ctx.vi.visual_extent
    if extent is None:
        return False
    rows, cols, block, line = extent
    row, col = ctx.buffer.cursor()
    last = min(row + rows - 1, ctx.buffer.len_lines() - 1)
    lead_col = col + cols if rows == 1 or block else cols
    visual = ctx.vi.visual
    visual.block = block
    visual.line = line
    visual.anchor = (row, col)
    visual.lead = (last, lead_col)
    return True


def visual_delete(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del repeat
    buffer, vi = ctx.buffer, ctx.vi
    text, kind = _selected_text(buffer, vi.visual)
    start = vi.visual.ordered[0]
    version = buffer.version
    with buffer.transaction("visual_delete"):
        target = _remove_selection(ctx, keep_line=False)
    if buffer.version == version:
        result = exit_visual(ctx)
        result.status = "noop"
        return result
    ctx.registers.yank_to(vim.register or UNNAMED, text, register_type=kind)
    vi.marks.set(CHANGE_START, start)
    buffer.set_cursor_unchecked(target)
    vi.marks.set(CHANGE_END, buffer.cursor())
    vi.request_pull()
    result = exit_visual(ctx)
    result.status = "delete"
    result.outcome = Outcome.TEXT_CHANGED
    return result


def visual_change(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    """Replace the selection with typed text.

    On ``.`` the selection is rebuilt from the extent of the last visual
    change, starting at the cursor, and the recorded text is re-typed.
    """

    buffer, vi = ctx.buffer, ctx.vi
    if repeat and not _restore_extent(ctx):
        return ModeResult(consumed=True, status="noop")
    text, kind = _selected_text(buffer, vi.visual)
    ctx.registers.yank_to(vim.register or UNNAMED, text, register_type=kind)
    vi.visual_extent = _extent(vi.visual)
    vi.marks.set(CHANGE_START, buffer.cursor())
    buffer.begin_group("visual_change")
    target = _remove_selection(ctx, keep_line=True)
    buffer.set_cursor_unchecked(target)
    vi.insert_count = 1
    vi.insert_kind = VimKind.CHANGE
    if repeat:
        vi.visual.clear()
        type_text(buffer, vi.text)
        end_insert(ctx)
        return ModeResult(consumed=True, status="repeat", outcome=Outcome.TEXT_CHANGED)
    vi.text = ""
    result = exit_visual(ctx)
    result.switch_to = "insert"
    result.status = "change"
    result.outcome = Outcome.TEXT_CHANGED
    return result


def visual_yank(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del repeat
    buffer, vi = ctx.buffer, ctx.vi
    text, kind = _selected_text(buffer, vi.visual)
    ctx.registers.yank_to(vim.register or UNNAMED, text, register_type=kind)
    (r0, c0), _ = vi.visual.ordered
    if vi.visual.block:
        c0 = min(vi.visual.anchor[1], vi.visual.lead[1])
    buffer.set_cursor_unchecked((r0, 0) if vi.visual.line else (r0, c0))
    result = exit_visual(ctx)
    result.status = "yank"
    return result


__all__ = [
    "begin_visual",
    "exit_visual",
    "refresh_selection",
    "selection_spans",
    "swap_diagonal",
    "swap_lead",
    "switch_visual",
    "visual_change",
    "visual_delete",
    "visual_move",
    "visual_yank",
]
