from __future__ import annotations

from typing import List

import pytest

from vi_engine import keys
from vi_engine.parser import (
    INVALID,
    Coroutine,
    HistoryKind,
    Mark,
    MarkKind,
    MotionKind,
    ResumeKind,
    Scrolling,
    TxtObj,
    Vim,
    VimKind,
    normal_grammar,
    visual_grammar,
)


def make_parser(visual: bool = False) -> Coroutine[Vim]:
    return Coroutine(visual_grammar if visual else normal_grammar)


def parse(tokens: str, *, visual: bool = False) -> Vim:
    parser = make_parser(visual)
    outcome = parser.resume_all(tokens)
    assert outcome.finished, f"{tokens!r} did not complete"
    assert outcome.value is not None
    return outcome.value


@pytest.mark.parametrize(
    ("tokens", "kind", "count", "motion"),
    [
        ("dw", VimKind.DELETE, 1, MotionKind.NEXT_WORD_START),
        ("3dw", VimKind.DELETE, 3, MotionKind.NEXT_WORD_START),
        ("d3w", VimKind.DELETE, 3, MotionKind.NEXT_WORD_START),
        ("2d3w", VimKind.DELETE, 6, MotionKind.NEXT_WORD_START),
        ("dd", VimKind.DELETE, 1, MotionKind.FULL_LINE),
        ("4yy", VimKind.YANK, 4, MotionKind.FULL_LINE),
        ("cc", VimKind.CHANGE, 1, MotionKind.FULL_LINE),
        ("d0", VimKind.DELETE, 1, MotionKind.START_OF_LINE),
        ("D", VimKind.DELETE, 1, MotionKind.END_OF_LINE),
        ("x", VimKind.DELETE, 1, MotionKind.RIGHT),
        ("5X", VimKind.DELETE, 5, MotionKind.LEFT),
        ("s", VimKind.CHANGE, 1, MotionKind.RIGHT),
        ("10j", VimKind.MOVE, 10, MotionKind.DOWN),
        ("0", VimKind.MOVE, 1, MotionKind.START_OF_LINE),
        ("gg", VimKind.MOVE, 1, MotionKind.START_OF_FILE),
        ("5gg", VimKind.MOVE, 5, MotionKind.TO_LINE),
        ("G", VimKind.MOVE, 1, MotionKind.END_OF_FILE),
        ("7G", VimKind.MOVE, 7, MotionKind.TO_LINE),
        ("%", VimKind.MOVE, 1, MotionKind.TO_MATCHING_BRACE),
        ("50%", VimKind.MOVE, 50, MotionKind.TO_LINE_PERCENT),
        ("ge", VimKind.MOVE, 1, MotionKind.PREV_WORD_END),
        ("g_", VimKind.MOVE, 1, MotionKind.END_OF_LINE_TEXT),
        ("_", VimKind.MOVE, 1, MotionKind.LINE_TEXT_DOWN),
        ("d3_", VimKind.DELETE, 3, MotionKind.LINE_TEXT_DOWN),
    ],
)
def test_normal_grammar_counts_and_motions(
    tokens: str, kind: VimKind, count: int, motion: MotionKind
) -> None:
    vim = parse(tokens)

    assert vim.kind is kind
    assert vim.count == count
    assert vim.motion is not None
    assert vim.motion.kind is motion


@pytest.mark.parametrize(
    "tokens", ["dc", "zq", "m!", '"!', '"ak', ">x", "gq", "²", "3²w", '"a0']
)
def test_unknown_sequences_are_invalid(tokens: str) -> None:
    parser = make_parser()
    outcome = parser.resume_all(tokens)

    assert outcome.finished
    assert outcome.value == INVALID


def test_operator_with_foreign_operator_is_invalid() -> None:
    assert parse("dc") == INVALID
    assert parse("yd") == INVALID


def test_register_prefix_is_kept_for_register_commands() -> None:
    vim = parse('"ayy')

    assert vim.kind is VimKind.YANK
    assert vim.register == "a"
    assert parse('"ak') == INVALID


def test_register_prefix_multiplies_counts() -> None:
    vim = parse('2"a3dd')

    assert vim.count == 6
    assert vim.register == "a"


def test_find_and_text_object_payloads() -> None:
    find = parse("2f,")
    assert find.motion is not None
    assert find.motion.kind is MotionKind.FIND_FORWARD
    assert find.motion.char == ","
    assert find.count == 2

    obj = parse("ci(")
    assert obj.kind is VimKind.CHANGE
    assert obj.motion is not None
    assert obj.motion.kind is MotionKind.PARENTHESIS
    assert obj.motion.obj is TxtObj.I

    quoted = parse('da"')
    assert quoted.motion is not None
    assert quoted.motion.kind is MotionKind.QUOTED
    assert quoted.motion.char == '"'
    assert quoted.motion.obj is TxtObj.A


def test_marks_history_and_scrolling() -> None:
    assert parse("ma") == Vim(VimKind.MARK, mark=Mark.named("a"))
    jump = parse("'a")
    assert jump.motion is not None
    assert jump.motion.mark == Mark.named("a")
    assert jump.motion.linewise
    exact = parse("`[")
    assert exact.motion is not None
    assert exact.motion.mark == Mark(MarkKind.CHANGE_START)
    assert not exact.motion.linewise
    for tokens in ("'[", "''", "'<"):
        special = parse(tokens)
        assert special.motion is not None
        assert not special.motion.line
        assert not special.motion.linewise

    assert parse("3" + keys.CTRL_O) == Vim(VimKind.HISTORY, 3, history=HistoryKind.PREV_JUMP)
    assert parse("g;").history is HistoryKind.PREV_CHANGE
    assert parse("zz").scroll is Scrolling.MIDDLE_OF_SCREEN
    assert parse(keys.CTRL_F).scroll is Scrolling.PAGE_DOWN


def test_backspace_edits_the_count() -> None:
    vim = parse("1" + keys.BS + "2j")

    assert vim.count == 2


def test_echo_tracks_the_pending_command() -> None:
    parser = make_parser()

    assert parser.resume("2").pending
    assert parser.resume("d").pending
    assert parser.display == "2d"

    done = parser.resume("w")
    assert done.finished
    assert parser.display == "2dw"


def test_search_yields_partials_then_returns() -> None:
    parser = make_parser()
    partial_terms: List[str] = []

    for token in "/ab":
        outcome = parser.resume(token)
        assert outcome.kind is ResumeKind.YIELD
        assert outcome.value is not None
        assert outcome.value.kind is VimKind.PARTIAL
        assert outcome.value.motion is not None
        partial_terms.append(outcome.value.motion.term or "")

    final = parser.resume("\n")

    assert partial_terms == ["", "a", "ab"]
    assert final.finished
    assert final.value is not None
    assert final.value.kind is VimKind.MOVE
    assert final.value.motion is not None
    assert final.value.motion.kind is MotionKind.SEARCH_FORWARD
    assert final.value.motion.term == "ab"


@pytest.mark.parametrize("tokens", ["3dw", '"a2yy', "ci{", "5gg", "2f;"])
def test_batch_and_single_feeding_agree(tokens: str) -> None:
    single = make_parser()
    last = None
    for token in tokens:
        last = single.resume(token)

    batch = make_parser().resume_all(tokens)

    assert last is not None
    assert last == batch


def test_resume_after_return_raises() -> None:
    parser = make_parser()
    parser.resume("j")

    assert parser.done
    with pytest.raises(RuntimeError):
        parser.resume("j")


@pytest.mark.parametrize(
    ("tokens", "kind"),
    [
        ("d", VimKind.DELETE),
        ("x", VimKind.DELETE),
        ("c", VimKind.CHANGE),
        ("y", VimKind.YANK),
        ("o", VimKind.VISUAL_SWAP_LEAD),
        ("O", VimKind.VISUAL_SWAP_DIAGONAL),
        ("V", VimKind.VISUAL),
    ],
)
def test_visual_grammar_operators(tokens: str, kind: VimKind) -> None:
    vim = parse(tokens, visual=True)

    assert vim.kind is kind


def test_visual_grammar_motions_and_objects() -> None:
    word = parse("iw", visual=True)
    assert word.kind is VimKind.MOVE
    assert word.motion is not None
    assert word.motion.kind is MotionKind.WORD

    assert parse("3j", visual=True).count == 3
    assert parse("u", visual=True) == INVALID

    yank = parse('"by', visual=True)
    assert yank.kind is VimKind.YANK
    assert yank.register == "b"
    assert yank.motion is not None
    assert yank.motion.kind is MotionKind.VISUAL
