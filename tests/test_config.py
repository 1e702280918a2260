from __future__ import annotations

import pytest

from vi_engine.buffer import TextBuffer
from vi_engine.config import EngineConfig, env_flag
from vi_engine.modes import ModeContext


def test_defaults() -> None:
    config = EngineConfig()

    assert config.jump_capacity == 100
    assert config.change_capacity == 100
    assert config.shiftwidth == 4
    assert config.tab_text == "\t"
    assert config.viewport_height == 24


def test_from_env_reads_prefixed_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VI_ENGINE_JUMP_CAPACITY", "5")
    monkeypatch.setenv("VI_ENGINE_SHIFTWIDTH", "2")
    monkeypatch.setenv("VI_ENGINE_TAB_TEXT", "  ")
    monkeypatch.setenv("VI_ENGINE_VIEWPORT_HEIGHT", "40")

    config = EngineConfig.from_env()

    assert config.jump_capacity == 5
    assert config.shiftwidth == 2
    assert config.tab_text == "  "
    assert config.viewport_height == 40
    assert config.change_capacity == 100


@pytest.mark.parametrize("raw", ["many", "-3", "0", ""])
def test_malformed_integers_fall_back(raw: str) -> None:
    config = EngineConfig.from_env({"VI_ENGINE_CHANGE_CAPACITY": raw})

    assert config.change_capacity == 100


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", True), ("yes", True), ("On", True), ("0", False), ("off", False)],
)
def test_env_flag(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("VI_ENGINE_SOMETHING", raw)

    assert env_flag("SOMETHING", not expected) is expected


def test_config_flows_into_buffer_and_state() -> None:
    config = EngineConfig(jump_capacity=7, viewport_height=12)
    buffer = TextBuffer.from_text("abc", config=config)

    context = ModeContext.for_buffer(buffer)

    assert buffer.viewport_height() == 12
    assert context.config is config
    assert context.vi.marks.jump_capacity == 7
    assert context.registers is buffer.registers
