from __future__ import annotations

from vi_engine.actions import display_all, sync_ranges
from vi_engine.buffer import TextBuffer
from vi_engine.parser import Direction
from vi_engine.search import search
from vi_engine.state import MATCH_TAG, RangeSet, SyncState, ViState


def make_buffer(text: str = "hello world") -> TextBuffer:
    return TextBuffer.from_text(text)


def test_take_resets_to_idle() -> None:
    ranges = RangeSet(MATCH_TAG)
    ranges.request_pull()

    assert ranges.take() is SyncState.PULL_PENDING
    assert ranges.take() is SyncState.IDLE


def test_push_writes_styles_under_the_tag() -> None:
    buffer = make_buffer()
    buffer.add_style((0, 2), 1)
    ranges = RangeSet(MATCH_TAG)
    ranges.replace([(6, 11)])

    assert sync_ranges(buffer, ranges) is SyncState.PUSH_PENDING
    assert buffer.styles_in((0, buffer.len_bytes()), MATCH_TAG) == [((6, 11), MATCH_TAG)]
    assert buffer.styles_in((0, buffer.len_bytes()), 1) == [((0, 2), 1)]
    assert ranges.sync is SyncState.IDLE


def test_push_replaces_previous_styles() -> None:
    buffer = make_buffer()
    ranges = RangeSet(MATCH_TAG)
    ranges.replace([(0, 5)])
    sync_ranges(buffer, ranges)

    ranges.clear()
    sync_ranges(buffer, ranges)

    assert buffer.styles_in((0, buffer.len_bytes()), MATCH_TAG) == []


def test_pull_rebuilds_after_edit() -> None:
    buffer = make_buffer()
    ranges = RangeSet(MATCH_TAG)
    ranges.replace([(6, 11)])
    sync_ranges(buffer, ranges)

    buffer.insert_str((0, 0), "XX")
    ranges.request_pull()

    assert sync_ranges(buffer, ranges) is SyncState.PULL_PENDING
    assert ranges.ranges == [((8, 13), MATCH_TAG)]
    assert ranges.sync is SyncState.IDLE


def test_idle_sync_does_nothing() -> None:
    buffer = make_buffer()
    ranges = RangeSet(MATCH_TAG)

    assert sync_ranges(buffer, ranges) is SyncState.IDLE
    assert buffer.styles() == []


def test_display_all_leaves_every_set_idle() -> None:
    buffer = make_buffer("one two one")
    vi = ViState()
    search(buffer, vi, "one", Direction.FORWARD, False)
    vi.request_pull()

    display_all(buffer, vi)

    assert vi.matches.ranges.sync is SyncState.IDLE
    assert vi.finds.ranges.sync is SyncState.IDLE
    assert vi.visual.ranges.sync is SyncState.IDLE
