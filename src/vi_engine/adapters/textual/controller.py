"""Minimal Textual adapter that wires ModeManager events into UI callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from vi_engine.buffer import BufferMirror
from vi_engine.modes import KeyInput, ModeManager, ModeResult
from vi_engine.runtime import telemetry
from vi_engine.search import SearchError


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[BufferMirror], None]
    update_status: Callable[[str], None] = _noop
    show_command: Callable[[str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    # Optional realtime log callback a host may use to surface debug lines
    log: Callable[[str], None] = _noop


class TextualVimAdapter:
    """Bridges ModeManager + bus events to a Textual-friendly surface."""

    def __init__(self, manager: ModeManager, hooks: TextualUIHooks) -> None:
        self.manager = manager
        self.hooks = hooks
        self.logger = telemetry.get_logger("vi_engine.adapters.textual")
        self._subscribe_events()
        self._refresh_buffer()
        self._refresh_command_line()

    def handle_textual_key(
        self,
        key: str,
        *,
        text: Optional[str] = None,
        modifiers: Iterable[str] = (),
    ) -> ModeResult:
        """Translate a Textual key event into a KeyInput and dispatch it.

        A failing search pattern is reported through the status line and a
        ``search.error`` event instead of escaping into the UI loop.
        """

        normalized_modifiers = tuple(str(mod).upper() for mod in modifiers)
        self._log_state("key ->", key=key, text=text, mods=normalized_modifiers)
        try:
            result = self.manager.handle_key(
                KeyInput(key=key, text=text, modifiers=normalized_modifiers)
            )
        except SearchError as exc:
            result = ModeResult(consumed=True, status="search_error", message=str(exc))
            self.manager.context.bus.emit(
                "search.error", {"kind": exc.kind, "pattern": exc.pattern}
            )
        self._after_mode_result(result)
        self._log_state(
            "result <-",
            consumed=result.consumed,
            status=result.status,
            message=result.message,
            switch_to=result.switch_to,
            outcome=result.outcome.value,
        )
        return result

    def _after_mode_result(self, result: ModeResult) -> None:
        status = result.message if result.status == "search_error" else None
        if status is None:
            info = self.manager.status()
            row, col = info.cursor
            status = f"-- {info.mode.upper()} -- {row + 1}:{col + 1}"
        self.hooks.update_status(status)
        self._refresh_buffer()
        self._refresh_command_line()

    def _subscribe_events(self) -> None:
        bus = self.manager.context.bus
        for event in ("mode.switch", "visual.selection", "search.error"):
            bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _handle_event(self, name: str, payload: object | None) -> None:
        # Surface the event to the host UI and also emit a realtime log line.
        self._log_state("event ->", event=name, payload=payload)
        self.hooks.handle_event(name, payload)

    def _refresh_buffer(self) -> None:
        context = self.manager.context
        mode = self.manager.status().mode
        selection = context.vi.visual.ordered if mode == "visual" else None
        mirror = context.buffer.mirror(
            selection=selection,
            attributes={"mode": mode},
        )
        self.hooks.update_buffer(mirror)

    def _refresh_command_line(self) -> None:
        self.hooks.show_command(self.manager.status().command)

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        line = " ".join(parts)
        self.logger.debug(line)
        self.hooks.log(line)

    def _state_metadata(self) -> Dict[str, object]:
        buffer = self.manager.context.buffer
        info = self.manager.status()
        return {
            "mode": info.mode,
            "cursor": info.cursor,
            "command": info.command,
            "buffer": buffer.name,
            "buffer_version": buffer.version,
        }


__all__ = ["TextualVimAdapter", "TextualUIHooks"]
