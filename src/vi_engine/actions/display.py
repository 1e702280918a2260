"""Keep match, find and selection highlights in step with the buffer styles."""

from __future__ import annotations

from vi_engine.buffer import TextBufferProtocol
from vi_engine.state import RangeSet, SyncState, ViState


def sync_ranges(buffer: TextBufferProtocol, ranges: RangeSet) -> SyncState:
    """Perform the pending sync of ``ranges`` and return which one ran.

    Push writes the engine list into the buffer under the set's tag, pull
    rebuilds the list from the buffer's styles after an edit moved them.
    The flag is back to ``IDLE`` when this returns.
    """

    pending = ranges.take()
    if pending is SyncState.PUSH_PENDING:
        buffer.remove_tag(ranges.tag)
        for span, tag in ranges.ranges:
            buffer.add_style(span, tag)
    elif pending is SyncState.PULL_PENDING:
        ranges.ranges = list(buffer.styles_in((0, buffer.len_bytes()), ranges.tag))
    return pending


def display_matches(buffer: TextBufferProtocol, vi: ViState) -> SyncState:
    return sync_ranges(buffer, vi.matches.ranges)


def display_finds(buffer: TextBufferProtocol, vi: ViState) -> SyncState:
    return sync_ranges(buffer, vi.finds.ranges)


def display_visual(buffer: TextBufferProtocol, vi: ViState) -> SyncState:
    return sync_ranges(buffer, vi.visual.ranges)


def display_all(buffer: TextBufferProtocol, vi: ViState) -> None:
    display_matches(buffer, vi)
    display_finds(buffer, vi)
    display_visual(buffer, vi)


__all__ = [
    "display_all",
    "display_finds",
    "display_matches",
    "display_visual",
    "sync_ranges",
]
