from __future__ import annotations

from typing import List, Optional

import pytest

from vi_engine.buffer import TextBuffer
from vi_engine.config import EngineConfig
from vi_engine.modes import (
    KeyInput,
    ModeContext,
    ModeManager,
    ModeResult,
    NormalMode,
    Outcome,
)
from vi_engine.search import SearchError
from vi_engine.state import SyncState

ESC = KeyInput(key="ESC")


def make_manager(text: str = "", *, config: Optional[EngineConfig] = None) -> ModeManager:
    buffer = TextBuffer.from_text(text, config=config)
    return ModeManager.with_default_modes(ModeContext.for_buffer(buffer))


def press(manager: ModeManager, sequence: str) -> List[ModeResult]:
    return [manager.handle_key(KeyInput(key=char, text=char)) for char in sequence]


def ctrl(manager: ModeManager, char: str) -> ModeResult:
    return manager.handle_key(KeyInput(key=char, modifiers=("CTRL",)))


def mode_of(manager: ModeManager) -> str:
    return manager.status().mode


def test_count_before_operator_deletes_words() -> None:
    manager = make_manager("one two three four")

    results = press(manager, "3dw")

    buffer = manager.context.buffer
    assert buffer.text() == "four"
    assert buffer.cursor() == (0, 0)
    assert mode_of(manager) == "normal"
    assert len(manager.context.vi.marks.change) == 1
    assert len(buffer.history) == 1
    assert results[-1].outcome is Outcome.TEXT_CHANGED
    assert [r.status for r in results[:-1]] == ["pending", "pending"]


def test_counted_insert_repeats_typed_text() -> None:
    manager = make_manager("")

    press(manager, "2iabc")
    assert mode_of(manager) == "insert"
    manager.handle_key(ESC)

    buffer = manager.context.buffer
    assert buffer.text() == "abcabc"
    assert buffer.cursor() == (0, 5)
    assert mode_of(manager) == "normal"
    assert len(buffer.history) == 1

    press(manager, "u")
    assert buffer.text() == ""


def test_linewise_visual_change_empties_buffer() -> None:
    manager = make_manager("one\ntwo\nthree")
    press(manager, "G")

    press(manager, "ggVG")
    assert mode_of(manager) == "visual"
    press(manager, "c")

    buffer = manager.context.buffer
    assert mode_of(manager) == "insert"
    assert buffer.text() == ""
    assert buffer.cursor() == (0, 0)

    manager.handle_key(ESC)
    assert mode_of(manager) == "normal"
    assert buffer.cursor() == (0, 0)


def test_invalid_command_changes_nothing() -> None:
    manager = make_manager("abc")

    results = press(manager, "dc")

    assert manager.context.buffer.text() == "abc"
    assert results[-1].status == "invalid"
    assert results[-1].outcome is Outcome.UNCHANGED
    assert manager.status().command == ""
    assert mode_of(manager) == "normal"


def test_visual_yank_fills_unnamed_register() -> None:
    manager = make_manager("hello world")

    press(manager, "ve")
    visual = manager.context.vi.visual
    assert visual.anchor == (0, 0)
    assert visual.lead == (0, 4)
    press(manager, "y")

    assert manager.context.registers.get('"').text == "hello"
    assert mode_of(manager) == "normal"
    assert manager.context.buffer.cursor() == (0, 0)
    assert manager.context.vi.marks.visual_lead == (0, 4)


def test_visual_selection_is_pushed_to_styles() -> None:
    manager = make_manager("hello world")

    press(manager, "vll")

    buffer = manager.context.buffer
    ranges = manager.context.vi.visual.ranges
    assert ranges.sync is SyncState.IDLE
    assert buffer.styles_in((0, buffer.len_bytes()), ranges.tag) == [((0, 3), ranges.tag)]

    manager.handle_key(ESC)
    assert buffer.styles_in((0, buffer.len_bytes()), ranges.tag) == []


def test_visual_delete_uses_named_register() -> None:
    manager = make_manager("abc def")

    press(manager, 'wv$"ad')

    assert manager.context.buffer.text() == "abc "
    assert manager.context.registers.get("a").text == "def"
    assert mode_of(manager) == "normal"


def test_open_lines_below_and_above() -> None:
    manager = make_manager("one")

    press(manager, "otwo")
    manager.handle_key(ESC)
    press(manager, "ggOzero")
    manager.handle_key(ESC)

    assert manager.context.buffer.text() == "zero\none\ntwo"
    assert manager.context.buffer.cursor() == (0, 3)


def test_dot_repeats_last_change() -> None:
    manager = make_manager("a b c d")

    press(manager, "dw")
    assert manager.context.buffer.text() == "b c d"
    press(manager, ".")
    assert manager.context.buffer.text() == "c d"
    press(manager, "2.")
    assert manager.context.buffer.text() == ""


def test_dot_repeats_insert_text() -> None:
    manager = make_manager("")

    press(manager, "ifoo")
    manager.handle_key(ESC)
    press(manager, ".")

    assert manager.context.buffer.text() == "fofooo"
    assert mode_of(manager) == "normal"


def test_dot_ignores_motions_and_yanks() -> None:
    manager = make_manager("one two")

    press(manager, "xwyw")
    press(manager, ".")

    assert manager.context.buffer.text() == "ne wo"


def test_dot_repeats_visual_change_over_same_extent() -> None:
    manager = make_manager("abcdef")

    press(manager, "vlcX")
    manager.handle_key(ESC)
    assert manager.context.buffer.text() == "Xcdef"

    press(manager, "l.")
    assert manager.context.buffer.text() == "XXef"


def test_jump_back_after_goto_end() -> None:
    manager = make_manager("a\nb\nc")

    press(manager, "G")
    assert manager.context.buffer.cursor() == (2, 1)

    result = ctrl(manager, "o")
    assert result.status == "history"
    assert manager.context.buffer.cursor() == (0, 0)

    assert ctrl(manager, "i").status == "history_edge"


def test_change_list_navigation() -> None:
    manager = make_manager("one\ntwo\nthree")

    press(manager, "x")
    press(manager, "G0x")
    press(manager, "g;")

    assert manager.context.buffer.cursor() == (2, 0)
    press(manager, "g;")
    assert manager.context.buffer.cursor() == (0, 0)


def test_marks_round_trip() -> None:
    manager = make_manager("one\n  two\nthree")

    press(manager, "jllma")
    press(manager, "G'a")
    assert manager.context.buffer.cursor() == (1, 2)

    press(manager, "G`a")
    assert manager.context.buffer.cursor() == (1, 2)


def test_search_then_repeat_wraps() -> None:
    manager = make_manager("one two\ntwo")

    press(manager, "/two\n")
    buffer = manager.context.buffer
    assert buffer.cursor() == (0, 4)
    assert manager.context.registers.get("/").text == "two"

    press(manager, "n")
    assert buffer.cursor() == (1, 0)
    press(manager, "n")
    assert buffer.cursor() == (0, 4)
    press(manager, "N")
    assert buffer.cursor() == (1, 0)


def test_incremental_search_highlights_without_moving() -> None:
    manager = make_manager("one two two")

    press(manager, "/tw")

    buffer = manager.context.buffer
    assert buffer.cursor() == (0, 0)
    assert manager.status().command == "/tw"
    tag = manager.context.vi.matches.ranges.tag
    assert buffer.styles_in((0, buffer.len_bytes()), tag) == [((4, 6), tag), ((8, 10), tag)]


def test_bad_search_pattern_raises_and_keeps_text() -> None:
    manager = make_manager("a(b")

    with pytest.raises(SearchError) as info:
        press(manager, "/(")

    assert info.value.kind == "pattern"
    assert manager.context.buffer.text() == "a(b"


def test_star_searches_word_under_cursor() -> None:
    manager = make_manager("foo bar foobar foo")

    press(manager, "*")

    assert manager.context.buffer.cursor() == (0, 15)
    assert manager.context.registers.get("/").text == r"\bfoo\b"


def test_find_and_repeat() -> None:
    manager = make_manager("a,b,c,d")

    press(manager, "f,")
    assert manager.context.buffer.cursor() == (0, 1)
    press(manager, ";")
    assert manager.context.buffer.cursor() == (0, 3)
    press(manager, ",")
    assert manager.context.buffer.cursor() == (0, 1)


def test_delete_to_find_is_inclusive() -> None:
    manager = make_manager("abc,def")

    press(manager, "df,")

    assert manager.context.buffer.text() == "def"


def test_change_inner_word() -> None:
    manager = make_manager("foo bar")

    press(manager, "ciwX")
    manager.handle_key(ESC)

    assert manager.context.buffer.text() == "X bar"


def test_change_word_keeps_trailing_space() -> None:
    manager = make_manager("foo bar")

    press(manager, "cwX")
    manager.handle_key(ESC)

    assert manager.context.buffer.text() == "X bar"


def test_yank_line_and_paste() -> None:
    manager = make_manager("one\ntwo")

    press(manager, "yyjp")

    assert manager.context.buffer.text() == "one\ntwo\none"
    assert manager.context.buffer.cursor() == (2, 0)
    assert manager.context.registers.get('"').type == "line"


def test_paste_before_and_charwise() -> None:
    manager = make_manager("abc")

    press(manager, "xp")
    assert manager.context.buffer.text() == "bac"

    press(manager, "0P")
    assert manager.context.buffer.text() == "abac"


def test_delete_line_with_count() -> None:
    manager = make_manager("one\ntwo\n  three\nfour")

    press(manager, "j2dd")

    assert manager.context.buffer.text() == "one\nfour"
    assert manager.context.buffer.cursor() == (1, 0)
    assert manager.context.registers.get('"').text == "two\n  three\n"


def test_delete_last_line() -> None:
    manager = make_manager("one\ntwo")

    press(manager, "jdd")

    assert manager.context.buffer.text() == "one"


def test_empty_edits_leave_no_change_record() -> None:
    manager = make_manager("")
    vi = manager.context.vi

    for sequence in ("dd", ">>", "<<", "vd"):
        results = press(manager, sequence)
        assert results[-1].status == "noop", sequence
        assert results[-1].outcome is not Outcome.TEXT_CHANGED
        assert mode_of(manager) == "normal"

    assert vi.marks.change == []
    assert vi.last_command is None
    assert len(manager.context.buffer.history) == 0
    assert manager.context.registers.get('"').text == ""

    press(manager, "yy")
    assert manager.context.registers.get('"').text == "\n"


def test_vertical_motions_fail_at_the_edges() -> None:
    manager = make_manager("a\nb")
    buffer = manager.context.buffer

    assert press(manager, "k")[-1].status == "no_motion"
    assert press(manager, "3j")[-1].status == "move"
    assert buffer.cursor() == (1, 0)
    assert press(manager, "j")[-1].status == "no_motion"

    press(manager, "dj")
    assert buffer.text() == "a\nb"
    press(manager, "ggdk")
    assert buffer.text() == "a\nb"
    assert manager.context.vi.marks.change == []


def test_underscore_goes_to_first_non_blank() -> None:
    manager = make_manager("    abc\n  def\nghi")
    buffer = manager.context.buffer

    press(manager, "fc_")
    assert buffer.cursor() == (0, 4)
    press(manager, "2_")
    assert buffer.cursor() == (1, 2)

    press(manager, "d_")
    assert buffer.text() == "    abc\nghi"
    assert manager.context.registers.get('"').type == "line"


def test_quote_on_special_marks_keeps_the_column() -> None:
    manager = make_manager("  abc")
    buffer = manager.context.buffer

    press(manager, "lllx")
    assert buffer.text() == "  ac"

    press(manager, "0'[")
    assert buffer.cursor() == (0, 3)

    press(manager, "ma0'a")
    assert buffer.cursor() == (0, 2)


def test_non_ascii_digits_are_not_counts() -> None:
    manager = make_manager("one two")

    results = press(manager, "²w")

    assert results[0].status == "invalid"
    assert manager.context.buffer.cursor() == (0, 4)
    assert manager.context.buffer.text() == "one two"


def test_register_before_zero_is_invalid() -> None:
    manager = make_manager("abc")

    results = press(manager, 'll"a0')

    assert results[-1].status == "invalid"
    assert manager.context.buffer.cursor() == (0, 2)
    assert manager.status().command == ""


def test_join_replace_and_indent() -> None:
    manager = make_manager("one\n   two", config=EngineConfig(shiftwidth=2))

    press(manager, "J")
    assert manager.context.buffer.text() == "one two"
    assert manager.context.buffer.cursor() == (0, 3)

    press(manager, "0rX")
    assert manager.context.buffer.text() == "Xne two"

    press(manager, ">>")
    assert manager.context.buffer.text() == "  Xne two"
    press(manager, "<<")
    assert manager.context.buffer.text() == "Xne two"


def test_undo_and_redo_commands() -> None:
    manager = make_manager("abc")

    press(manager, "x")
    press(manager, "u")
    assert manager.context.buffer.text() == "abc"

    ctrl(manager, "r")
    assert manager.context.buffer.text() == "bc"

    assert press(manager, "uu")[-1].status == "nothing_to_undo"


def test_insert_mode_edit_keys() -> None:
    manager = make_manager("")

    press(manager, "iab")
    manager.handle_key(KeyInput(key="BACKSPACE"))
    manager.handle_key(KeyInput(key="ENTER"))
    press(manager, "c")
    manager.handle_key(ESC)

    assert manager.context.buffer.text() == "a\nc"


def test_insert_mode_ignores_unknown_keys() -> None:
    manager = make_manager("")
    press(manager, "i")

    result = manager.handle_key(KeyInput(key="F5"))

    assert result.consumed is False
    assert result.outcome is Outcome.CONTINUE


def test_scrolling_keeps_cursor_in_view() -> None:
    manager = make_manager("\n".join(str(n) for n in range(40)), config=EngineConfig(viewport_height=10))

    ctrl(manager, "f")
    buffer = manager.context.buffer
    assert buffer.scroll_offset() == 8
    assert buffer.cursor()[0] == 8

    press(manager, "zt")
    assert buffer.scroll_offset() == 8
    ctrl(manager, "e")
    assert buffer.scroll_offset() == 9
    assert buffer.cursor()[0] == 9


def test_status_reports_pending_command() -> None:
    manager = make_manager("abc")

    press(manager, "2d")
    info = manager.status()

    assert info.mode == "normal"
    assert info.command == "2d"
    assert info.cursor == (0, 0)

    manager.handle_key(ESC)
    assert manager.status().command == ""


def test_mode_switch_events_are_published() -> None:
    manager = make_manager("abc")
    seen: List[object] = []
    manager.context.bus.subscribe("mode.switch", seen.append)

    press(manager, "v")
    manager.handle_key(ESC)
    press(manager, "a")

    assert seen == ["visual", "normal", "insert"]


def test_manager_rejects_duplicates_and_unknown_modes() -> None:
    manager = make_manager()

    with pytest.raises(ValueError):
        manager.register_mode(NormalMode)
    with pytest.raises(KeyError):
        manager.switch_mode("replace")


def test_manager_without_modes_raises() -> None:
    buffer = TextBuffer.from_text("")
    manager = ModeManager(ModeContext.for_buffer(buffer))

    with pytest.raises(RuntimeError):
        manager.handle_key(KeyInput(key="j"))


def test_switching_out_of_insert_closes_the_session() -> None:
    manager = make_manager("")
    press(manager, "ihi")

    manager.switch_mode("normal")

    assert len(manager.context.buffer.history) == 1
    assert manager.context.vi.marks.insert == (0, 2)
