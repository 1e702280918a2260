"""Incremental command parsing: command types, coroutine driver, grammars."""

from .commands import (
    INVALID,
    Direction,
    HistoryKind,
    Mark,
    MarkKind,
    Motion,
    MotionKind,
    Scrolling,
    TxtObj,
    Vim,
    VimKind,
)
from .coroutine import Coroutine, ParseState, Resume, ResumeKind
from .grammar import normal_grammar, visual_grammar

__all__ = [
    "INVALID",
    "Coroutine",
    "Direction",
    "HistoryKind",
    "Mark",
    "MarkKind",
    "Motion",
    "MotionKind",
    "ParseState",
    "Resume",
    "ResumeKind",
    "Scrolling",
    "TxtObj",
    "Vim",
    "VimKind",
    "normal_grammar",
    "visual_grammar",
]
