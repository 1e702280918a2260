"""Mode manager, concrete modes, and the context they share."""

from .base_mode import KeyInput, Mode, ModeBus, ModeContext, ModeResult, Outcome
from .normal_mode import NormalMode
from .insert_mode import InsertMode
from .visual_mode import VisualMode
from .mode_manager import ModeManager, StatusInfo

__all__ = [
    "KeyInput",
    "Mode",
    "ModeBus",
    "ModeContext",
    "ModeManager",
    "ModeResult",
    "Outcome",
    "StatusInfo",
    "NormalMode",
    "InsertMode",
    "VisualMode",
]
