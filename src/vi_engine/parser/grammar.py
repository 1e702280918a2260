"""Normal- and visual-mode command grammars.

Both are generator functions driven by ``Coroutine``; see its module doc for
the ``yield`` protocol. Unknown sequences return ``INVALID`` rather than
raising.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Generator, Optional, Tuple, Union

from vi_engine import keys

from .commands import (
    INVALID,
    MarkKind,
    HistoryKind,
    Motion,
    MotionKind,
    Scrolling,
    TxtObj,
    Vim,
    VimKind,
    mark_for_key,
    move,
)
from .coroutine import ParseState

Step = Generator[Optional[Vim], str, "Vim"]

REGISTER_NAMES = frozenset('abcdefghijklmnopqrstuvwxyz"*/')
_REGISTER_KINDS = frozenset(
    {VimKind.DELETE, VimKind.CHANGE, VimKind.YANK, VimKind.PASTE}
)


class _NoMatch:
    """Marks a token the current sub-grammar did not recognise."""

    __slots__ = ("token",)

    def __init__(self, token: str) -> None:
        self.token = token


Parsed = Union[Vim, _NoMatch]


def _pull(state: ParseState) -> Generator[Optional[Vim], str, str]:
    token = yield None
    state.push(token)
    return token


def _is_digit(token: str) -> bool:
    # only ASCII digits count; keys like "²" fall through to the command
    return len(token) == 1 and "0" <= token <= "9"


def _count(
    token: str, state: ParseState
) -> Generator[Optional[Vim], str, Tuple[Optional[int], str]]:
    digits = ""
    while _is_digit(token) or token == keys.BS:
        if token == keys.BS:
            if digits:
                digits = digits[:-1]
                state.pop()
        else:
            digits += token
            state.push(token)
        token = yield None
    return (int(digits) if digits else None, token)


def _search(
    count: int, kind: MotionKind, state: ParseState
) -> Generator[Optional[Vim], str, Vim]:
    term = ""
    while True:
        token = yield Vim(VimKind.PARTIAL, count, Motion(kind, term=term))
        if token == "\n":
            break
        if token == keys.BS:
            if len(state.echo) > 1:
                state.pop()
            term = term[:-1]
        else:
            state.push(token)
            term += token
    return move(count, kind, term=term)


_SIMPLE_MOTIONS = {
    "h": (MotionKind.LEFT, 1),
    "l": (MotionKind.RIGHT, 1),
    " ": (MotionKind.RIGHT, 1),
    "k": (MotionKind.UP, 1),
    "-": (MotionKind.UP, 1),
    "j": (MotionKind.DOWN, 1),
    "+": (MotionKind.DOWN, 1),
    "\n": (MotionKind.DOWN, 1),
    keys.CTRL_U: (MotionKind.HALF_PAGE_UP, 0),
    keys.CTRL_D: (MotionKind.HALF_PAGE_DOWN, 0),
    "H": (MotionKind.TO_TOP_OF_SCREEN, 0),
    "M": (MotionKind.TO_MIDDLE_OF_SCREEN, 0),
    "L": (MotionKind.TO_BOTTOM_OF_SCREEN, 0),
    "|": (MotionKind.TO_COL, 0),
    "w": (MotionKind.NEXT_WORD_START, 1),
    "b": (MotionKind.PREV_WORD_START, 1),
    "e": (MotionKind.NEXT_WORD_END, 1),
    "W": (MotionKind.NEXT_BIGWORD_START, 1),
    "B": (MotionKind.PREV_BIGWORD_START, 1),
    "E": (MotionKind.NEXT_BIGWORD_END, 1),
    "(": (MotionKind.PREV_SENTENCE, 1),
    ")": (MotionKind.NEXT_SENTENCE, 1),
    "{": (MotionKind.PREV_PARAGRAPH, 1),
    "}": (MotionKind.NEXT_PARAGRAPH, 1),
    "$": (MotionKind.END_OF_LINE, 1),
    ";": (MotionKind.FIND_REPEAT_NEXT, 1),
    ",": (MotionKind.FIND_REPEAT_PREV, 1),
    "*": (MotionKind.SEARCH_WORD_FORWARD, 1),
    "#": (MotionKind.SEARCH_WORD_BACKWARD, 1),
    "n": (MotionKind.SEARCH_REPEAT_NEXT, 1),
    "N": (MotionKind.SEARCH_REPEAT_PREV, 1),
}

_FINDS = {
    "f": MotionKind.FIND_FORWARD,
    "F": MotionKind.FIND_BACK,
    "t": MotionKind.FIND_TILL_FORWARD,
    "T": MotionKind.FIND_TILL_BACK,
}

_OBJECTS = {
    "w": MotionKind.WORD,
    "W": MotionKind.BIGWORD,
    "s": MotionKind.SENTENCE,
    "p": MotionKind.PARAGRAPH,
    "t": MotionKind.TAGGED,
    "[": MotionKind.BRACKET,
    "]": MotionKind.BRACKET,
    "(": MotionKind.PARENTHESIS,
    ")": MotionKind.PARENTHESIS,
    "b": MotionKind.PARENTHESIS,
    "{": MotionKind.BRACE,
    "}": MotionKind.BRACE,
    "B": MotionKind.BRACE,
    "<": MotionKind.ANGLED,
    ">": MotionKind.ANGLED,
}


def _g_prefix(count: Optional[int], state: ParseState) -> Step:
    token = yield from _pull(state)
    if token == "e":
        return move(count or 1, MotionKind.PREV_WORD_END)
    if token == "E":
        return move(count or 1, MotionKind.PREV_BIGWORD_END)
    if token == "_":
        return move(count or 1, MotionKind.END_OF_LINE_TEXT)
    if token == ";":
        return Vim(VimKind.HISTORY, count or 1, history=HistoryKind.PREV_CHANGE)
    if token == ",":
        return Vim(VimKind.HISTORY, count or 1, history=HistoryKind.NEXT_CHANGE)
    if token == "g":
        if count is not None:
            return move(count, MotionKind.TO_LINE)
        return move(1, MotionKind.START_OF_FILE)
    return INVALID


def _motion(
    token: str, count: Optional[int], state: ParseState
) -> Generator[Optional[Vim], str, Parsed]:
    simple = _SIMPLE_MOTIONS.get(token)
    if simple is not None:
        kind, default = simple
        return move(count if count is not None else default, kind)
    if token == "_":
        return move(count or 1, MotionKind.LINE_TEXT_DOWN)
    if token == "^":
        return move(1, MotionKind.START_OF_LINE_TEXT)
    if token == "g":
        return (yield from _g_prefix(count, state))
    if token == "G":
        if count is not None:
            return move(count, MotionKind.TO_LINE)
        return move(1, MotionKind.END_OF_FILE)
    if token == "%":
        if count is not None:
            return move(count, MotionKind.TO_LINE_PERCENT)
        return move(1, MotionKind.TO_MATCHING_BRACE)
    if token in _FINDS:
        target = yield from _pull(state)
        return move(count or 1, _FINDS[token], char=target)
    if token == "/":
        return (yield from _search(count or 1, MotionKind.SEARCH_FORWARD, state))
    if token == "?":
        return (yield from _search(count or 1, MotionKind.SEARCH_BACK, state))
    if token in ("'", "`"):
        mark = mark_for_key((yield from _pull(state)))
        if mark is None:
            return INVALID
        # only named marks are linewise; '' and '[ keep the exact column
        line = token == "'" and mark.kind is MarkKind.NAMED
        return move(1, MotionKind.TO_MARK, mark=mark, line=line)
    if token == keys.CTRL_O:
        return Vim(VimKind.HISTORY, count or 1, history=HistoryKind.PREV_JUMP)
    if token in (keys.CTRL_I, "\t"):
        return Vim(VimKind.HISTORY, count or 1, history=HistoryKind.NEXT_JUMP)
    return _NoMatch(token)


def _text_object(
    token: str, count: Optional[int], state: ParseState
) -> Generator[Optional[Vim], str, Parsed]:
    if token not in ("a", "i"):
        return _NoMatch(token)
    obj = TxtObj.A if token == "a" else TxtObj.I
    target = yield from _pull(state)
    if target in ("'", '"', "`"):
        return move(count or 1, MotionKind.QUOTED, char=target, obj=obj)
    kind = _OBJECTS.get(target)
    if kind is None:
        return INVALID
    return move(count or 1, kind, obj=obj)


def _motion_or_object(
    token: str, count: Optional[int], state: ParseState
) -> Generator[Optional[Vim], str, Parsed]:
    parsed = yield from _motion(token, count, state)
    if isinstance(parsed, _NoMatch):
        parsed = yield from _text_object(parsed.token, count, state)
    return parsed


def _scroll(
    token: str, count: Optional[int], state: ParseState
) -> Generator[Optional[Vim], str, Parsed]:
    if token == "z":
        follow = yield from _pull(state)
        target = {
            "z": Scrolling.MIDDLE_OF_SCREEN,
            "t": Scrolling.TOP_OF_SCREEN,
            "b": Scrolling.BOTTOM_OF_SCREEN,
        }.get(follow)
        if target is None:
            return INVALID
        return Vim(VimKind.SCROLL, 1, scroll=target)
    simple = {
        keys.CTRL_Y: Scrolling.UP,
        keys.CTRL_E: Scrolling.DOWN,
        keys.CTRL_B: Scrolling.PAGE_UP,
        keys.CTRL_F: Scrolling.PAGE_DOWN,
    }.get(token)
    if simple is None:
        return _NoMatch(token)
    return Vim(VimKind.SCROLL, count or 1, scroll=simple)


def _operator(
    kind: VimKind, key: str, count: Optional[int], state: ParseState
) -> Step:
    token = yield None
    if token == "0":
        state.push(token)
        return Vim(kind, count or 1, Motion(MotionKind.START_OF_LINE))
    inner, token = yield from _count(token, state)
    state.push(token)
    parsed = yield from _motion_or_object(token, inner, state)
    if isinstance(parsed, Vim):
        if parsed.kind is not VimKind.MOVE or parsed.motion is None:
            return INVALID
        return Vim(kind, (count or 1) * parsed.count, parsed.motion)
    if parsed.token == key:
        return Vim(kind, count or 1, Motion(MotionKind.FULL_LINE))
    return INVALID


def _register(state: ParseState) -> Generator[Optional[Vim], str, bool]:
    name = yield from _pull(state)
    if name not in REGISTER_NAMES:
        return False
    state.register = name
    return True


_DIRECT = {
    "i": VimKind.INSERT,
    "a": VimKind.APPEND,
    "I": VimKind.INSERT_AT_TEXT,
    "A": VimKind.APPEND_AT_END,
    "o": VimKind.APPEND_LINE,
    "O": VimKind.PREPEND_LINE,
    "J": VimKind.JOIN_LINES,
    "u": VimKind.UNDO,
    keys.CTRL_R: VimKind.REDO,
    ".": VimKind.REPEAT,
}

_SHORTHAND = {
    "D": (VimKind.DELETE, MotionKind.END_OF_LINE),
    "C": (VimKind.CHANGE, MotionKind.END_OF_LINE),
    "S": (VimKind.CHANGE, MotionKind.END_OF_LINE),
    "s": (VimKind.CHANGE, MotionKind.RIGHT),
    "x": (VimKind.DELETE, MotionKind.RIGHT),
    "X": (VimKind.DELETE, MotionKind.LEFT),
}

_OPERATORS = {"d": VimKind.DELETE, "c": VimKind.CHANGE, "y": VimKind.YANK}


def _normal_command(token: str, count: Optional[int], state: ParseState) -> Step:
    parsed = yield from _motion(token, count, state)
    if isinstance(parsed, Vim):
        return parsed
    parsed = yield from _scroll(token, count, state)
    if isinstance(parsed, Vim):
        return parsed

    times = count or 1
    if token == "m":
        mark = mark_for_key((yield from _pull(state)))
        return Vim(VimKind.MARK, mark=mark) if mark is not None else INVALID
    if token == "v":
        return Vim(VimKind.VISUAL)
    if token == "V":
        return Vim(VimKind.VISUAL, line=True)
    if token == keys.CTRL_V:
        return Vim(VimKind.VISUAL, block=True)
    if token == "r":
        char = yield from _pull(state)
        return Vim(VimKind.REPLACE, times, char=char)
    if token in _OPERATORS:
        return (yield from _operator(_OPERATORS[token], token, count, state))
    if token in (">", "<"):
        follow = yield from _pull(state)
        if follow != token:
            return INVALID
        return Vim(VimKind.INDENT if token == ">" else VimKind.DEDENT, times)
    if token in ("p", "P"):
        return Vim(VimKind.PASTE, times, before=token == "P")
    if token in _SHORTHAND:
        kind, motion = _SHORTHAND[token]
        return Vim(kind, times, Motion(motion))
    if token in _DIRECT:
        return Vim(_DIRECT[token], times)
    return INVALID


def normal_grammar(state: ParseState) -> Step:
    """Parse one Normal-mode command: ``[count]["x[count]]command``."""

    token = yield None
    if token == "0":
        state.push(token)
        return move(1, MotionKind.START_OF_LINE)

    count, token = yield from _count(token, state)
    if token == '"':
        state.push(token)
        if not (yield from _register(state)):
            return INVALID
        token = yield None
        if token == "0":
            # `"x0` is the 0 motion, which takes no register
            state.push(token)
            return INVALID
        inner, token = yield from _count(token, state)
        if inner is not None:
            count = (count or 1) * inner

    state.push(token)
    vim = yield from _normal_command(token, count, state)
    if state.register is None:
        return vim
    if vim.kind not in _REGISTER_KINDS:
        return INVALID
    return replace(vim, register=state.register)


def visual_grammar(state: ParseState) -> Step:
    """Parse one Visual-mode command: a motion extends the selection, an
    operator acts on it."""

    token = yield None
    if token == "0":
        state.push(token)
        return move(1, MotionKind.START_OF_LINE)

    count, token = yield from _count(token, state)
    if token == '"':
        state.push(token)
        if not (yield from _register(state)):
            return INVALID
        token = yield from _pull(state)
    else:
        state.push(token)

    if state.register is None:
        parsed = yield from _motion_or_object(token, count, state)
        if isinstance(parsed, Vim):
            return parsed if parsed.kind in (VimKind.MOVE, VimKind.PARTIAL) else INVALID
        token = parsed.token

    register = state.register
    visual = Motion(MotionKind.VISUAL)
    if token in ("d", "x"):
        return Vim(VimKind.DELETE, 1, visual, register=register)
    if token in ("c", "s"):
        return Vim(VimKind.CHANGE, 1, visual, register=register)
    if token == "y":
        return Vim(VimKind.YANK, 1, visual, register=register)
    if register is not None:
        return INVALID
    if token == "o":
        return Vim(VimKind.VISUAL_SWAP_LEAD)
    if token == "O":
        return Vim(VimKind.VISUAL_SWAP_DIAGONAL)
    if token == "v":
        return Vim(VimKind.VISUAL)
    if token == "V":
        return Vim(VimKind.VISUAL, line=True)
    if token == keys.CTRL_V:
        return Vim(VimKind.VISUAL, block=True)
    return INVALID


__all__ = ["REGISTER_NAMES", "normal_grammar", "visual_grammar"]
