"""Engine sub-state that persists across mode transitions."""

from .marks import MarkRegistry
from .ranges import FIND_TAG, MATCH_TAG, VISUAL_TAG, RangeSet, SyncState
from .vi_state import FindState, MatchState, ViState, VisualState

__all__ = [
    "FIND_TAG",
    "MATCH_TAG",
    "VISUAL_TAG",
    "FindState",
    "MarkRegistry",
    "MatchState",
    "RangeSet",
    "SyncState",
    "ViState",
    "VisualState",
]
