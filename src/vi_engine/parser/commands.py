"""Command, motion and mark values produced by the grammars."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Direction(Enum):
    FORWARD = 1
    BACKWARD = -1

    def mul(self, other: "Direction") -> "Direction":
        """Combine two directions the way ``N`` reverses a ``?`` search."""

        return Direction.FORWARD if self is other else Direction.BACKWARD


class TxtObj(Enum):
    A = "a"
    I = "i"  # noqa: E741


class MarkKind(Enum):
    NAMED = "named"
    INSERT = "insert"
    VISUAL_ANCHOR = "visual_anchor"
    VISUAL_LEAD = "visual_lead"
    CHANGE_START = "change_start"
    CHANGE_END = "change_end"
    JUMP = "jump"


@dataclass(frozen=True, slots=True)
class Mark:
    kind: MarkKind
    name: Optional[str] = None

    @classmethod
    def named(cls, name: str) -> "Mark":
        return cls(MarkKind.NAMED, name)


_MARK_KEYS = {
    "'": MarkKind.JUMP,
    "`": MarkKind.JUMP,
    "[": MarkKind.CHANGE_START,
    "]": MarkKind.CHANGE_END,
    "<": MarkKind.VISUAL_ANCHOR,
    ">": MarkKind.VISUAL_LEAD,
    "^": MarkKind.INSERT,
}


def mark_for_key(key: str) -> Optional[Mark]:
    if len(key) == 1 and "a" <= key <= "z":
        return Mark.named(key)
    kind = _MARK_KEYS.get(key)
    return Mark(kind) if kind is not None else None


class MotionKind(Enum):
    VISUAL = "visual"

    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    HALF_PAGE_UP = "half_page_up"
    HALF_PAGE_DOWN = "half_page_down"
    TO_TOP_OF_SCREEN = "to_top_of_screen"
    TO_MIDDLE_OF_SCREEN = "to_middle_of_screen"
    TO_BOTTOM_OF_SCREEN = "to_bottom_of_screen"

    TO_COL = "to_col"
    TO_LINE = "to_line"
    TO_LINE_PERCENT = "to_line_percent"
    TO_MATCHING_BRACE = "to_matching_brace"
    TO_MARK = "to_mark"
    START_OF_FILE = "start_of_file"
    END_OF_FILE = "end_of_file"

    NEXT_WORD_START = "next_word_start"
    PREV_WORD_START = "prev_word_start"
    NEXT_WORD_END = "next_word_end"
    PREV_WORD_END = "prev_word_end"
    NEXT_BIGWORD_START = "next_bigword_start"
    PREV_BIGWORD_START = "prev_bigword_start"
    NEXT_BIGWORD_END = "next_bigword_end"
    PREV_BIGWORD_END = "prev_bigword_end"
    START_OF_LINE = "start_of_line"
    END_OF_LINE = "end_of_line"
    START_OF_LINE_TEXT = "start_of_line_text"
    END_OF_LINE_TEXT = "end_of_line_text"
    LINE_TEXT_DOWN = "line_text_down"
    PREV_SENTENCE = "prev_sentence"
    NEXT_SENTENCE = "next_sentence"
    PREV_PARAGRAPH = "prev_paragraph"
    NEXT_PARAGRAPH = "next_paragraph"

    FULL_LINE = "full_line"

    FIND_FORWARD = "find_forward"
    FIND_BACK = "find_back"
    FIND_TILL_FORWARD = "find_till_forward"
    FIND_TILL_BACK = "find_till_back"
    FIND_REPEAT_NEXT = "find_repeat_next"
    FIND_REPEAT_PREV = "find_repeat_prev"

    SEARCH_WORD_FORWARD = "search_word_forward"
    SEARCH_WORD_BACKWARD = "search_word_backward"
    SEARCH_FORWARD = "search_forward"
    SEARCH_BACK = "search_back"
    SEARCH_REPEAT_NEXT = "search_repeat_next"
    SEARCH_REPEAT_PREV = "search_repeat_prev"

    WORD = "word"
    BIGWORD = "bigword"
    SENTENCE = "sentence"
    PARAGRAPH = "paragraph"
    BRACKET = "bracket"
    PARENTHESIS = "parenthesis"
    ANGLED = "angled"
    TAGGED = "tagged"
    BRACE = "brace"
    QUOTED = "quoted"


_JUMPS = frozenset(
    {
        MotionKind.TO_TOP_OF_SCREEN,
        MotionKind.TO_MIDDLE_OF_SCREEN,
        MotionKind.TO_BOTTOM_OF_SCREEN,
        MotionKind.TO_LINE,
        MotionKind.TO_LINE_PERCENT,
        MotionKind.TO_MATCHING_BRACE,
        MotionKind.TO_MARK,
        MotionKind.END_OF_FILE,
        MotionKind.PREV_SENTENCE,
        MotionKind.NEXT_SENTENCE,
        MotionKind.PREV_PARAGRAPH,
        MotionKind.NEXT_PARAGRAPH,
        MotionKind.SEARCH_WORD_FORWARD,
        MotionKind.SEARCH_WORD_BACKWARD,
        MotionKind.SEARCH_FORWARD,
        MotionKind.SEARCH_BACK,
        MotionKind.SEARCH_REPEAT_NEXT,
        MotionKind.SEARCH_REPEAT_PREV,
    }
)

_LINEWISE = frozenset(
    {
        MotionKind.UP,
        MotionKind.DOWN,
        MotionKind.LINE_TEXT_DOWN,
        MotionKind.TO_LINE,
        MotionKind.START_OF_FILE,
        MotionKind.END_OF_FILE,
        MotionKind.FULL_LINE,
    }
)

_INCLUSIVE = frozenset(
    {
        MotionKind.NEXT_WORD_END,
        MotionKind.NEXT_BIGWORD_END,
        MotionKind.PREV_WORD_END,
        MotionKind.PREV_BIGWORD_END,
        MotionKind.FIND_FORWARD,
        MotionKind.FIND_TILL_FORWARD,
        MotionKind.TO_MATCHING_BRACE,
    }
)

_TEXT_OBJECTS = frozenset(
    {
        MotionKind.WORD,
        MotionKind.BIGWORD,
        MotionKind.SENTENCE,
        MotionKind.PARAGRAPH,
        MotionKind.BRACKET,
        MotionKind.PARENTHESIS,
        MotionKind.ANGLED,
        MotionKind.TAGGED,
        MotionKind.BRACE,
        MotionKind.QUOTED,
    }
)


@dataclass(frozen=True, slots=True)
class Motion:
    """A cursor-movement specifier, independent of any operator.

    ``char`` carries the target of ``f``/``t`` finds and the quote of a
    quoted text object, ``term`` the pattern of ``/`` and ``?``, ``obj`` the
    ``a``/``i`` modifier of text objects, ``mark`` and ``line`` the target of
    ``'x`` (``line=True``) and `` `x ``.
    """

    kind: MotionKind
    char: Optional[str] = None
    term: Optional[str] = None
    obj: Optional[TxtObj] = None
    mark: Optional[Mark] = None
    line: bool = False

    @property
    def is_jump(self) -> bool:
        return self.kind in _JUMPS

    @property
    def linewise(self) -> bool:
        if self.kind is MotionKind.TO_MARK:
            return self.line
        return self.kind in _LINEWISE

    @property
    def inclusive(self) -> bool:
        return self.kind in _INCLUSIVE

    @property
    def is_text_object(self) -> bool:
        return self.kind in _TEXT_OBJECTS


class HistoryKind(Enum):
    PREV_JUMP = "prev_jump"
    NEXT_JUMP = "next_jump"
    PREV_CHANGE = "prev_change"
    NEXT_CHANGE = "next_change"


class Scrolling(Enum):
    UP = "up"
    DOWN = "down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    MIDDLE_OF_SCREEN = "middle_of_screen"
    TOP_OF_SCREEN = "top_of_screen"
    BOTTOM_OF_SCREEN = "bottom_of_screen"


class VimKind(Enum):
    INVALID = "invalid"
    REPEAT = "repeat"
    PARTIAL = "partial"
    MOVE = "move"
    HISTORY = "history"
    SCROLL = "scroll"
    MARK = "mark"

    VISUAL = "visual"
    VISUAL_SWAP_LEAD = "visual_swap_lead"
    VISUAL_SWAP_DIAGONAL = "visual_swap_diagonal"

    UNDO = "undo"
    REDO = "redo"

    JOIN_LINES = "join_lines"
    INSERT = "insert"
    APPEND = "append"
    INSERT_AT_TEXT = "insert_at_text"
    APPEND_AT_END = "append_at_end"
    APPEND_LINE = "append_line"
    PREPEND_LINE = "prepend_line"
    DELETE = "delete"
    CHANGE = "change"
    YANK = "yank"
    PASTE = "paste"
    REPLACE = "replace"
    INDENT = "indent"
    DEDENT = "dedent"


_NORMAL_MEMO = frozenset(
    {
        VimKind.JOIN_LINES,
        VimKind.INSERT,
        VimKind.APPEND,
        VimKind.INSERT_AT_TEXT,
        VimKind.APPEND_AT_END,
        VimKind.APPEND_LINE,
        VimKind.PREPEND_LINE,
        VimKind.DELETE,
        VimKind.CHANGE,
        VimKind.PASTE,
        VimKind.REPLACE,
        VimKind.INDENT,
        VimKind.DEDENT,
    }
)

INSERT_KINDS = frozenset(
    {
        VimKind.INSERT,
        VimKind.APPEND,
        VimKind.INSERT_AT_TEXT,
        VimKind.APPEND_AT_END,
        VimKind.APPEND_LINE,
        VimKind.PREPEND_LINE,
    }
)


@dataclass(frozen=True, slots=True)
class Vim:
    """A completed command.

    ``count`` is the effective repeat count (already multiplied across
    count-before-operator and count-before-motion). ``block``/``line``
    select the visual flavour, ``before`` is set for ``P``, ``char`` holds
    the replacement of ``r`` and ``register`` the ``"x`` prefix.
    """

    kind: VimKind
    count: int = 1
    motion: Optional[Motion] = None
    history: Optional[HistoryKind] = None
    scroll: Optional[Scrolling] = None
    mark: Optional[Mark] = None
    char: Optional[str] = None
    block: bool = False
    line: bool = False
    before: bool = False
    register: Optional[str] = None

    @property
    def is_normal_memo(self) -> bool:
        """Whether ``.`` may repeat this command from Normal mode."""

        return self.kind in _NORMAL_MEMO

    @property
    def is_visual_memo(self) -> bool:
        return (
            self.kind is VimKind.CHANGE
            and self.motion is not None
            and self.motion.kind is MotionKind.VISUAL
        )

    @property
    def enters_insert(self) -> bool:
        return self.kind in INSERT_KINDS or self.kind is VimKind.CHANGE


INVALID = Vim(VimKind.INVALID)


def move(count: int, kind: MotionKind, **fields: object) -> Vim:
    return Vim(VimKind.MOVE, count, Motion(kind, **fields))  # type: ignore[arg-type]


__all__ = [
    "Direction",
    "TxtObj",
    "MarkKind",
    "Mark",
    "mark_for_key",
    "MotionKind",
    "Motion",
    "HistoryKind",
    "Scrolling",
    "VimKind",
    "Vim",
    "INVALID",
    "INSERT_KINDS",
    "move",
]
