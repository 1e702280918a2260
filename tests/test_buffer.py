from __future__ import annotations

import pytest

from vi_engine.buffer import BufferValidationError, RegisterBank, RegisterValue, TextBuffer


def make_buffer(text: str = "") -> TextBuffer:
    return TextBuffer.from_text(text)


def test_byte_offsets_follow_utf8() -> None:
    buffer = make_buffer("héllo\nwörld")

    assert buffer.len_bytes() == 13
    assert buffer.byte_at((0, 2)) == 3
    assert buffer.byte_at((1, 0)) == 7
    assert buffer.byte_pos(8) == (1, 1)
    assert buffer.byte_pos(9) == (1, 1)
    assert buffer.byte_pos(10) == (1, 2)


def test_char_offsets_round_trip_positions() -> None:
    buffer = make_buffer("ab\ncd")

    assert buffer.char_offset((1, 1)) == 4
    assert buffer.pos_at(4) == (1, 1)
    assert buffer.pos_at(100) == (1, 2)


def test_str_slice_spans_lines() -> None:
    buffer = make_buffer("one\ntwo\nthree")

    assert buffer.str_slice((0, 1), (2, 2)) == "ne\ntwo\nth"
    assert buffer.str_slice((2, 2), (0, 1)) == "ne\ntwo\nth"


def test_out_of_range_cursor_is_rejected() -> None:
    buffer = make_buffer("abc")

    with pytest.raises(BufferValidationError) as info:
        buffer.set_cursor((0, 9))

    assert info.value.cursor == (0, 9)
    buffer.set_cursor_unchecked((5, 9))
    assert buffer.cursor() == (0, 3)


def test_insert_and_delete_move_the_cursor() -> None:
    buffer = make_buffer("abc")
    buffer.set_cursor((0, 2))

    buffer.insert_str((0, 0), "xy")
    assert buffer.text() == "xyabc"
    assert buffer.cursor() == (0, 4)

    removed = buffer.delete_range((0, 0), (0, 3))
    assert removed == "xya"
    assert buffer.cursor() == (0, 1)


def test_styles_shift_with_edits() -> None:
    buffer = make_buffer("hello world")
    buffer.add_style((6, 11), 7)

    buffer.insert_str((0, 0), "¡")
    assert buffer.styles() == [((8, 13), 7)]

    buffer.delete_range((0, 0), (0, 7))
    assert buffer.styles() == [((0, 5), 7)]

    buffer.delete_range((0, 0), (0, 5))
    assert buffer.styles() == []


def test_transaction_records_one_undo_entry() -> None:
    buffer = make_buffer("abc")

    with buffer.transaction("edit"):
        buffer.insert_str((0, 3), "d")
        buffer.insert_str((0, 4), "e")

    assert len(buffer.history) == 1
    assert buffer.undo() is True
    assert buffer.text() == "abc"
    assert buffer.redo() is True
    assert buffer.text() == "abcde"
    assert buffer.redo() is False


def test_groups_span_several_edits() -> None:
    buffer = make_buffer("")

    buffer.begin_group("insert")
    for char in "hey":
        buffer.insert_char(char)
    buffer.end_group()

    assert buffer.text() == "hey"
    assert len(buffer.history) == 1
    buffer.undo()
    assert buffer.text() == ""


def test_undo_restores_styles() -> None:
    buffer = make_buffer("hello")
    buffer.add_style((0, 5), 3)

    buffer.delete_range((0, 0), (0, 5))
    assert buffer.styles() == []

    buffer.undo()
    assert buffer.styles() == [((0, 5), 3)]


def test_delete_prev_and_next_char_join_lines() -> None:
    buffer = make_buffer("ab\ncd")
    buffer.set_cursor((1, 0))

    assert buffer.delete_prev_char() is True
    assert buffer.text() == "abcd"
    assert buffer.cursor() == (0, 2)

    buffer.set_cursor((0, 4))
    assert buffer.delete_next_char() is False


def test_scroll_keeps_cursor_visible() -> None:
    buffer = make_buffer("\n".join(str(n) for n in range(50)))
    buffer.set_viewport_height(10)
    buffer.set_cursor((30, 0))

    buffer.scroll_cursor_to_visible()
    assert buffer.scroll_offset() == 21

    buffer.set_cursor((5, 0))
    buffer.scroll_cursor_to_visible()
    assert buffer.scroll_offset() == 5


def test_registers_mirror_into_unnamed() -> None:
    registers = RegisterBank()

    registers.yank_to("a", "text", register_type="line")
    assert registers.get('"') == RegisterValue("text", "line")

    registers.yank_to("/", "pattern")
    assert registers.get('"').text == "text"

    with pytest.raises(ValueError):
        registers.set("b", RegisterValue("x", "column"))


def test_clipboard_register_uses_host_hooks() -> None:
    stored = {}

    class HostRegisters(RegisterBank):
        def clipboard_get(self):
            return stored.get("clip")

        def clipboard_set(self, value: str) -> None:
            stored["clip"] = value

    registers = HostRegisters()
    registers.yank_to("*", "one\n", register_type="line")

    assert stored["clip"] == "one\n"
    assert registers.get("*").type == "line"
    stored["clip"] = "other"
    assert registers.get("*") == RegisterValue("other", "character")


def test_mirror_reports_selection_and_styles() -> None:
    buffer = make_buffer("abc")
    buffer.add_style((0, 1), 2)

    mirror = buffer.mirror(selection=((0, 0), (0, 2)), attributes={"mode": "visual"})

    assert mirror.text == "abc"
    assert mirror.selection == ((0, 0), (0, 2))
    assert mirror.styles == [((0, 1), 2)]
    assert mirror.attributes == {"mode": "visual"}
