"""Motion resolver: turn a ``Motion`` plus count into a target position."""

from __future__ import annotations

from typing import Callable, Dict, Optional

from vi_engine import query, search
from vi_engine.buffer import Cursor, TextBuffer
from vi_engine.modes.base_mode import ModeContext, ModeResult, Outcome
from vi_engine.parser import Direction, Mark, MarkKind, Motion, MotionKind, TxtObj, Vim

Resolver = Callable[[ModeContext, Motion, int, Cursor], Optional[Cursor]]


def _half_page(ctx: ModeContext, count: int, cursor: Cursor, sign: int) -> Cursor:
    if count > 0:
        ctx.vi.page = count
    page = ctx.vi.page or max(ctx.buffer.viewport_height() // 2, 1)
    return query.move_vertical(ctx.buffer, cursor, sign * page)


def _vertical(buffer: TextBuffer, cursor: Cursor, delta: int) -> Optional[Cursor]:
    # j and k fail outright at the first and last line
    target = query.move_vertical(buffer, cursor, delta)
    return target if target[0] != cursor[0] else None


def _to_mark(ctx: ModeContext, motion: Motion) -> Optional[Cursor]:
    if motion.mark is None:
        return None
    pos = ctx.vi.marks.get(motion.mark)
    if pos is None:
        return None
    pos = ctx.buffer.clamp(pos)
    if motion.line:
        return query.first_non_blank(ctx.buffer, pos[0])
    return pos


def _select_match(ctx: ModeContext, origin: Cursor, count: int, direction: Direction) -> Optional[Cursor]:
    byte = search.select_match(ctx.vi, ctx.buffer.byte_at(origin), count, direction)
    return ctx.buffer.byte_pos(byte) if byte is not None else None


def _search(ctx: ModeContext, motion: Motion, count: int, cursor: Cursor) -> Optional[Cursor]:
    direction = Direction.FORWARD if motion.kind is MotionKind.SEARCH_FORWARD else Direction.BACKWARD
    search.search(
        ctx.buffer, ctx.vi, motion.term or "", direction, False, registers=ctx.registers
    )
    return _select_match(ctx, cursor, count, direction)


def _search_repeat(ctx: ModeContext, motion: Motion, count: int, cursor: Cursor) -> Optional[Cursor]:
    matches = ctx.vi.matches
    if matches.term is None:
        return None
    direction = matches.direction
    if motion.kind is MotionKind.SEARCH_REPEAT_PREV:
        direction = direction.mul(Direction.BACKWARD)
    search.search(ctx.buffer, ctx.vi, matches.term, matches.direction, False)
    return _select_match(ctx, cursor, count, direction)


def _search_word(ctx: ModeContext, motion: Motion, count: int, cursor: Cursor) -> Optional[Cursor]:
    span = query.word_under_cursor(ctx.buffer, cursor)
    if span is None:
        return None
    start, end = span
    direction = (
        Direction.FORWARD
        if motion.kind is MotionKind.SEARCH_WORD_FORWARD
        else Direction.BACKWARD
    )
    term = search.word_pattern(ctx.buffer.str_slice(start, end))
    search.search(ctx.buffer, ctx.vi, term, direction, False, registers=ctx.registers)
    return _select_match(ctx, start, count, direction)


_FIND_FLAGS = {
    MotionKind.FIND_FORWARD: (Direction.FORWARD, False),
    MotionKind.FIND_BACK: (Direction.BACKWARD, False),
    MotionKind.FIND_TILL_FORWARD: (Direction.FORWARD, True),
    MotionKind.FIND_TILL_BACK: (Direction.BACKWARD, True),
}


def _find(ctx: ModeContext, motion: Motion, count: int, cursor: Cursor) -> Optional[Cursor]:
    direction, till = _FIND_FLAGS[motion.kind]
    search.find(ctx.buffer, ctx.vi, cursor[0], motion.char or "", direction, till)
    return search.select_find(ctx.buffer, ctx.vi, cursor, count, direction)


def _find_repeat(ctx: ModeContext, motion: Motion, count: int, cursor: Cursor) -> Optional[Cursor]:
    direction = ctx.vi.finds.direction
    if motion.kind is MotionKind.FIND_REPEAT_PREV:
        direction = direction.mul(Direction.BACKWARD)
    return search.select_find(ctx.buffer, ctx.vi, cursor, count, direction)


def _buf(fn: Callable[[TextBuffer, Cursor, int], Optional[Cursor]]) -> Resolver:
    return lambda ctx, motion, count, cursor: fn(ctx.buffer, cursor, count)


_RESOLVERS: Dict[MotionKind, Resolver] = {
    MotionKind.LEFT: _buf(query.move_left),
    MotionKind.RIGHT: _buf(query.move_right),
    MotionKind.UP: _buf(lambda b, c, n: _vertical(b, c, -n)),
    MotionKind.DOWN: _buf(_vertical),
    MotionKind.HALF_PAGE_UP: lambda ctx, m, n, c: _half_page(ctx, n, c, -1),
    MotionKind.HALF_PAGE_DOWN: lambda ctx, m, n, c: _half_page(ctx, n, c, 1),
    MotionKind.TO_TOP_OF_SCREEN: _buf(lambda b, c, n: query.screen_top(b, n)),
    MotionKind.TO_MIDDLE_OF_SCREEN: _buf(lambda b, c, n: query.screen_middle(b)),
    MotionKind.TO_BOTTOM_OF_SCREEN: _buf(lambda b, c, n: query.screen_bottom(b, n)),
    MotionKind.TO_COL: _buf(query.to_col),
    MotionKind.TO_LINE: _buf(lambda b, c, n: query.to_line(b, n)),
    MotionKind.TO_LINE_PERCENT: _buf(lambda b, c, n: query.to_line_percent(b, n)),
    MotionKind.TO_MATCHING_BRACE: _buf(lambda b, c, n: query.matching_brace(b, c)),
    MotionKind.TO_MARK: lambda ctx, m, n, c: _to_mark(ctx, m),
    MotionKind.START_OF_FILE: _buf(lambda b, c, n: (0, 0)),
    MotionKind.END_OF_FILE: _buf(lambda b, c, n: query.end_of_buffer(b)),
    MotionKind.NEXT_WORD_START: _buf(query.next_word_start),
    MotionKind.PREV_WORD_START: _buf(query.prev_word_start),
    MotionKind.NEXT_WORD_END: _buf(query.next_word_end),
    MotionKind.PREV_WORD_END: _buf(query.prev_word_end),
    MotionKind.NEXT_BIGWORD_START: _buf(lambda b, c, n: query.next_word_start(b, c, n, True)),
    MotionKind.PREV_BIGWORD_START: _buf(lambda b, c, n: query.prev_word_start(b, c, n, True)),
    MotionKind.NEXT_BIGWORD_END: _buf(lambda b, c, n: query.next_word_end(b, c, n, True)),
    MotionKind.PREV_BIGWORD_END: _buf(lambda b, c, n: query.prev_word_end(b, c, n, True)),
    MotionKind.START_OF_LINE: _buf(lambda b, c, n: (c[0], 0)),
    MotionKind.END_OF_LINE: _buf(query.end_of_line),
    MotionKind.START_OF_LINE_TEXT: _buf(lambda b, c, n: query.first_non_blank(b, c[0])),
    MotionKind.END_OF_LINE_TEXT: _buf(query.end_of_line_text),
    MotionKind.LINE_TEXT_DOWN: _buf(query.line_text_down),
    MotionKind.PREV_SENTENCE: _buf(query.prev_sentence),
    MotionKind.NEXT_SENTENCE: _buf(query.next_sentence),
    MotionKind.PREV_PARAGRAPH: _buf(query.prev_paragraph),
    MotionKind.NEXT_PARAGRAPH: _buf(query.next_paragraph),
    MotionKind.FIND_FORWARD: _find,
    MotionKind.FIND_BACK: _find,
    MotionKind.FIND_TILL_FORWARD: _find,
    MotionKind.FIND_TILL_BACK: _find,
    MotionKind.FIND_REPEAT_NEXT: _find_repeat,
    MotionKind.FIND_REPEAT_PREV: _find_repeat,
    MotionKind.SEARCH_WORD_FORWARD: _search_word,
    MotionKind.SEARCH_WORD_BACKWARD: _search_word,
    MotionKind.SEARCH_FORWARD: _search,
    MotionKind.SEARCH_BACK: _search,
    MotionKind.SEARCH_REPEAT_NEXT: _search_repeat,
    MotionKind.SEARCH_REPEAT_PREV: _search_repeat,
}


def resolve_target(ctx: ModeContext, motion: Motion, count: int) -> Optional[Cursor]:
    """Where ``count`` repetitions of ``motion`` lead from the cursor.

    Jump motions that resolve record a ``Jump`` mark at the pre-motion
    cursor. ``SearchError`` propagates before any state changes.
    """

    resolver = _RESOLVERS.get(motion.kind)
    if resolver is None:
        return None
    cursor = ctx.buffer.cursor()
    target = resolver(ctx, motion, count, cursor)
    if target is None:
        return None
    if motion.is_jump:
        ctx.vi.marks.set(Mark(MarkKind.JUMP), cursor)
    return ctx.buffer.clamp(target)


def resolve_object(ctx: ModeContext, motion: Motion, count: int) -> Optional[query.Span]:
    """Span covered by a text object at the cursor, ``None`` if there is none."""

    buffer = ctx.buffer
    cursor = buffer.cursor()
    obj = motion.obj or TxtObj.I
    kind = motion.kind
    if kind is MotionKind.WORD:
        return query.word_object(buffer, cursor, count, obj)
    if kind is MotionKind.BIGWORD:
        return query.word_object(buffer, cursor, count, obj, big=True)
    if kind is MotionKind.SENTENCE:
        return query.sentence_object(buffer, cursor, count, obj)
    if kind is MotionKind.PARAGRAPH:
        return query.paragraph_object(buffer, cursor, count, obj)
    if kind is MotionKind.TAGGED:
        return query.tag_object(buffer, cursor, count, obj)
    if kind is MotionKind.QUOTED:
        return query.quote_object(buffer, cursor, obj, motion.char or '"')
    opener = {
        MotionKind.BRACKET: "[",
        MotionKind.PARENTHESIS: "(",
        MotionKind.ANGLED: "<",
        MotionKind.BRACE: "{",
    }.get(kind)
    if opener is None:
        return None
    return query.bracket_object(buffer, cursor, count, obj, opener)


def is_inclusive(ctx: ModeContext, motion: Motion) -> bool:
    """``;``/``,`` inherit inclusiveness from the find they repeat."""

    if motion.kind in (MotionKind.FIND_REPEAT_NEXT, MotionKind.FIND_REPEAT_PREV):
        direction = ctx.vi.finds.direction
        if motion.kind is MotionKind.FIND_REPEAT_PREV:
            direction = direction.mul(Direction.BACKWARD)
        return direction is Direction.FORWARD
    return motion.inclusive


def move_cursor(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    del repeat
    if vim.motion is None:
        return ModeResult(consumed=True, status="invalid")
    target = resolve_target(ctx, vim.motion, vim.count)
    if target is None:
        return ModeResult(consumed=True, status="no_motion")
    ctx.buffer.set_cursor_unchecked(target)
    return ModeResult(consumed=True, status="move", outcome=Outcome.CHANGED)


def incremental_search(ctx: ModeContext, vim: Vim, repeat: bool) -> ModeResult:
    """Highlight hits of a ``/``/``?`` pattern while it is being typed."""

    del repeat
    motion = vim.motion
    if motion is None:
        return ModeResult(consumed=True, status="invalid")
    direction = (
        Direction.FORWARD if motion.kind is MotionKind.SEARCH_FORWARD else Direction.BACKWARD
    )
    search.search(ctx.buffer, ctx.vi, motion.term or "", direction, True)
    if motion.term:
        search.select_match(
            ctx.vi, ctx.buffer.byte_at(ctx.buffer.cursor()), vim.count, direction
        )
    return ModeResult(consumed=True, status="pending", outcome=Outcome.CHANGED)


__all__ = [
    "incremental_search",
    "is_inclusive",
    "move_cursor",
    "resolve_object",
    "resolve_target",
]
