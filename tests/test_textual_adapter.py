from __future__ import annotations

from typing import Any, Dict, List

from vi_engine.adapters.textual import TextualUIHooks, TextualVimAdapter
from vi_engine.buffer import BufferMirror, TextBuffer
from vi_engine.modes import ModeContext, ModeManager


def make_manager(text: str = "") -> ModeManager:
    buffer = TextBuffer.from_text(text)
    return ModeManager.with_default_modes(ModeContext.for_buffer(buffer))


def test_adapter_updates_buffer_and_status() -> None:
    manager = make_manager("abc")
    updates: List[BufferMirror] = []
    statuses: List[str] = []
    hooks = TextualUIHooks(
        update_buffer=updates.append,
        update_status=statuses.append,
    )
    adapter = TextualVimAdapter(manager, hooks)

    adapter.handle_textual_key("i")
    adapter.handle_textual_key("x", text="x")
    adapter.handle_textual_key("ESC")

    assert updates[-1].text == "xabc"
    assert updates[-1].attributes == {"mode": "normal"}
    assert "-- INSERT -- 1:1" in statuses
    assert statuses[-1] == "-- NORMAL -- 1:1"


def test_adapter_echoes_pending_command() -> None:
    manager = make_manager("a b")
    command_lines: List[str] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: None,
        show_command=command_lines.append,
    )
    adapter = TextualVimAdapter(manager, hooks)

    adapter.handle_textual_key("2", text="2")
    adapter.handle_textual_key("d", text="d")
    assert command_lines[-1] == "2d"

    adapter.handle_textual_key("w", text="w")
    assert command_lines[-1] == ""
    assert manager.context.buffer.text() == ""


def test_adapter_surfaces_visual_selection_events() -> None:
    manager = make_manager("hello")
    events: List[Dict[str, Any]] = []
    mirrors: List[BufferMirror] = []
    hooks = TextualUIHooks(
        update_buffer=mirrors.append,
        handle_event=lambda name, payload: events.append(
            {"name": name, "payload": payload}
        ),
    )
    adapter = TextualVimAdapter(manager, hooks)

    adapter.handle_textual_key("v")
    adapter.handle_textual_key("l")

    visual_payloads = [event for event in events if event["name"] == "visual.selection"]
    assert visual_payloads
    assert visual_payloads[-1]["payload"] == {"anchor": (0, 0), "cursor": (0, 1)}
    assert {"name": "mode.switch", "payload": "visual"} in events
    assert mirrors[-1].selection == ((0, 0), (0, 1))


def test_adapter_reports_bad_search_patterns() -> None:
    manager = make_manager("a(b")
    statuses: List[str] = []
    events: List[tuple[str, object | None]] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: None,
        update_status=statuses.append,
        handle_event=lambda name, payload: events.append((name, payload)),
    )
    adapter = TextualVimAdapter(manager, hooks)

    adapter.handle_textual_key("/", text="/")
    result = adapter.handle_textual_key("(", text="(")

    assert result.status == "search_error"
    assert result.consumed is True
    assert statuses[-1] == result.message
    assert ("search.error", {"kind": "pattern", "pattern": "("}) in events
    assert manager.context.buffer.text() == "a(b"


def test_adapter_emits_log_lines() -> None:
    manager = make_manager()
    logs: List[str] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: None,
        log=logs.append,
    )
    adapter = TextualVimAdapter(manager, hooks)

    adapter.handle_textual_key("i")

    assert logs[0].startswith("key ->")
    assert any(line.startswith("result <-") for line in logs)
    assert any(line.startswith("event ->") for line in logs)
