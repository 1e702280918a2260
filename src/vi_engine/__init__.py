"""UI-agnostic vi-style modal editing engine."""

from .buffer import TextBuffer
from .config import EngineConfig
from .search import SearchError
from .modes import KeyInput, ModeContext, ModeManager, ModeResult, Outcome, StatusInfo

__all__ = [
    "EngineConfig",
    "KeyInput",
    "ModeContext",
    "ModeManager",
    "ModeResult",
    "Outcome",
    "SearchError",
    "StatusInfo",
    "TextBuffer",
    "actions",
    "adapters",
    "buffer",
    "modes",
    "parser",
    "query",
    "runtime",
    "search",
    "state",
]

__version__ = "0.1.0"
