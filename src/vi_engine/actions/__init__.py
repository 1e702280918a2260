"""Command handlers: motions, changes, visual selection, scrolling, history."""

from .changes import ChangeRange, change_range, end_insert, record_key
from .dispatch import NORMAL, VISUAL, execute_normal, execute_visual
from .display import (
    display_all,
    display_finds,
    display_matches,
    display_visual,
    sync_ranges,
)
from .motions import resolve_object, resolve_target
from .visual import exit_visual, selection_spans

__all__ = [
    "ChangeRange",
    "NORMAL",
    "VISUAL",
    "change_range",
    "display_all",
    "display_finds",
    "display_matches",
    "display_visual",
    "end_insert",
    "execute_normal",
    "execute_visual",
    "exit_visual",
    "record_key",
    "resolve_object",
    "resolve_target",
    "selection_spans",
    "sync_ranges",
]
