from __future__ import annotations

import pytest

from vi_engine.buffer import RegisterBank, TextBuffer
from vi_engine.parser import Direction
from vi_engine.search import SearchError, find, search, select_find, select_match, word_pattern
from vi_engine.state import ViState

FORWARD = Direction.FORWARD
BACKWARD = Direction.BACKWARD


def make_buffer(text: str) -> TextBuffer:
    return TextBuffer.from_text(text)


def spans(vi: ViState) -> list:
    return [vi.matches.ranges.span(i) for i in range(len(vi.matches))]


def test_search_collects_byte_ranges() -> None:
    buffer = make_buffer("ab cd ab\nab")
    vi = ViState()

    search(buffer, vi, "ab", FORWARD, False)

    assert spans(vi) == [(0, 2), (6, 8), (9, 11)]
    assert vi.matches.term == "ab"


def test_search_ranges_are_utf8_offsets() -> None:
    buffer = make_buffer("é x é")
    vi = ViState()

    search(buffer, vi, "é", FORWARD, False)

    assert spans(vi) == [(0, 2), (5, 7)]


@pytest.mark.parametrize(
    ("cursor_byte", "direction", "expected"),
    [
        (0, FORWARD, 6),
        (6, FORWARD, 9),
        (9, FORWARD, 0),
        (9, BACKWARD, 6),
        (0, BACKWARD, 9),
    ],
)
def test_select_match_wraps(cursor_byte: int, direction: Direction, expected: int) -> None:
    buffer = make_buffer("ab cd ab\nab")
    vi = ViState()
    search(buffer, vi, "ab", FORWARD, False)

    assert select_match(vi, cursor_byte, 1, direction) == expected


def test_select_match_counts_hits() -> None:
    buffer = make_buffer("ab cd ab\nab")
    vi = ViState()
    search(buffer, vi, "ab", FORWARD, False)

    assert select_match(vi, 0, 2, FORWARD) == 9
    assert vi.matches.idx == 2


def test_select_match_without_hits() -> None:
    vi = ViState()

    assert select_match(vi, 0, 1, FORWARD) is None


def test_bad_pattern_leaves_previous_matches() -> None:
    buffer = make_buffer("ab cd ab")
    vi = ViState()
    search(buffer, vi, "ab", FORWARD, False)

    with pytest.raises(SearchError) as info:
        search(buffer, vi, "(", FORWARD, False)

    assert info.value.kind == "pattern"
    assert info.value.pattern == "("
    assert vi.matches.term == "ab"
    assert spans(vi) == [(0, 2), (6, 8)]


def test_empty_terms() -> None:
    buffer = make_buffer("ab cd ab")
    vi = ViState()
    search(buffer, vi, "cd", FORWARD, False)

    search(buffer, vi, "", BACKWARD, False)
    assert vi.matches.term == "cd"
    assert vi.matches.direction is BACKWARD

    search(buffer, vi, "", FORWARD, True)
    assert len(vi.matches) == 0
    assert vi.matches.term is None


def test_final_search_writes_search_register() -> None:
    buffer = make_buffer("ab cd ab")
    vi = ViState()
    registers = RegisterBank()

    search(buffer, vi, "c", FORWARD, True, registers=registers)
    assert registers.get("/").text == ""

    search(buffer, vi, "cd", FORWARD, False, registers=registers)
    assert registers.get("/").text == "cd"


def test_empty_matches_are_skipped() -> None:
    buffer = make_buffer("abc")
    vi = ViState()

    search(buffer, vi, "x*", FORWARD, False)

    assert len(vi.matches) == 0


def test_word_pattern_escapes() -> None:
    assert word_pattern("a.b") == r"\ba\.b\b"


def test_find_forward_and_clamped_counts() -> None:
    buffer = make_buffer("a,b,c,d")
    vi = ViState()

    find(buffer, vi, 0, ",", FORWARD, False)

    assert len(vi.finds) == 3
    assert select_find(buffer, vi, (0, 0), 1, FORWARD) == (0, 1)
    assert select_find(buffer, vi, (0, 0), 10, FORWARD) == (0, 5)
    assert select_find(buffer, vi, (0, 6), 1, FORWARD) is None


def test_till_stops_short_and_skips_adjacent_hit() -> None:
    buffer = make_buffer("abc,def,g")
    vi = ViState()

    find(buffer, vi, 0, ",", FORWARD, True)

    assert select_find(buffer, vi, (0, 0), 1, FORWARD) == (0, 2)
    assert select_find(buffer, vi, (0, 2), 1, FORWARD) == (0, 6)


def test_find_backward() -> None:
    buffer = make_buffer("abc,def")
    vi = ViState()

    find(buffer, vi, 0, ",", BACKWARD, False)
    assert select_find(buffer, vi, (0, 6), 1, BACKWARD) == (0, 3)

    find(buffer, vi, 0, ",", BACKWARD, True)
    assert select_find(buffer, vi, (0, 6), 1, BACKWARD) == (0, 4)


def test_find_recomputes_on_another_row() -> None:
    buffer = make_buffer("a,b\nxx,y")
    vi = ViState()
    find(buffer, vi, 0, ",", FORWARD, False)

    assert select_find(buffer, vi, (1, 0), 1, FORWARD) == (1, 2)
    assert vi.finds.row == 1
