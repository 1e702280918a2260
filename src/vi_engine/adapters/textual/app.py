"""Executable Textual app that hosts the vi engine."""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

try:  # pragma: no cover - imported only when demo is run
    from rich.text import Text
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' extra to use vi_engine.adapters.textual.app"
    ) from exc

from vi_engine.buffer import BufferMirror, TextBuffer
from vi_engine.config import EngineConfig
from vi_engine.modes import ModeContext, ModeManager
from vi_engine.runtime import telemetry
from vi_engine.state import FIND_TAG, MATCH_TAG, VISUAL_TAG

from .controller import TextualUIHooks, TextualVimAdapter

TAG_STYLES: Dict[int, str] = {
    VISUAL_TAG: "on grey35",
    MATCH_TAG: "black on yellow",
    FIND_TAG: "underline bold",
}


def create_default_manager(
    text: str = "", *, viewport_height: Optional[int] = None
) -> ModeManager:
    """Build a ModeManager over ``text`` with Normal, Insert and Visual modes."""

    config = EngineConfig.from_env()
    if viewport_height is not None:
        config = replace(config, viewport_height=viewport_height)
    buffer = TextBuffer.from_text(text, config=config)
    return ModeManager.with_default_modes(ModeContext.for_buffer(buffer))


def render_mirror(mirror: BufferMirror, cursor_offset: int) -> Text:
    """Rich text for a buffer snapshot: tagged styles plus a block cursor.

    Style spans arrive as UTF-8 byte ranges and are mapped back to
    character offsets before styling.
    """

    encoded = mirror.text.encode("utf-8")

    def char_at(byte: int) -> int:
        return len(encoded[:byte].decode("utf-8", errors="ignore"))

    rendered = Text(mirror.text, no_wrap=True)
    for (start, end), tag in mirror.styles:
        style = TAG_STYLES.get(tag)
        if style:
            rendered.stylize(style, char_at(start), char_at(end))
    if cursor_offset >= len(mirror.text) or mirror.text[cursor_offset] == "\n":
        # cursor past the line end gets a visible cell of its own
        rendered = rendered[:cursor_offset] + Text(" ", style="reverse") + rendered[cursor_offset:]
    else:
        rendered.stylize("reverse", cursor_offset, cursor_offset + 1)
    return rendered


class ViEngineApp(App[None]):
    """Minimal Textual UI embedding the vi engine."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#buffer-view {
		height: 1fr;
		border: round $accent;
		padding: 0 1;
		content-align: left top;
		overflow: hidden;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}

	#command-line {
		height: 1;
		background: $surface-darken-2;
		padding: 0 1;
	}
	"""

    BINDINGS = [("ctrl+q", "quit", "Quit")]

    def __init__(
        self,
        *,
        text: str = "",
        viewport_height: Optional[int] = None,
    ) -> None:
        super().__init__()
        self._initial_text = text
        self._viewport_height = viewport_height
        self.manager: ModeManager | None = None
        self.adapter: TextualVimAdapter | None = None
        self._buffer_widget: Static | None = None
        self._status_widget: Static | None = None
        self._command_widget: Static | None = None
        self.logger = telemetry.get_logger("vi_engine.adapters.textual.app")

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="buffer-area"):
            self._buffer_widget = Static("", id="buffer-view", markup=False)
            yield self._buffer_widget
        self._status_widget = Static("", id="status-line")
        self._command_widget = Static("", id="command-line", markup=False)
        yield self._status_widget
        yield self._command_widget
        yield Footer()

    async def on_mount(self) -> None:
        self.manager = create_default_manager(
            self._initial_text, viewport_height=self._viewport_height
        )
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            show_command=self._show_command,
            handle_event=self._handle_event,
        )
        self.adapter = TextualVimAdapter(self.manager, hooks)

    def on_resize(self, event: events.Resize) -> None:
        # an explicit --viewport-height wins over the widget size
        if self.manager is None or self._viewport_height is not None:
            return
        if self._buffer_widget is None:
            return
        rows = max(self._buffer_widget.content_size.height, 1)
        buffer = self.manager.context.buffer
        buffer.set_viewport_height(rows)
        buffer.scroll_cursor_to_visible()
        self._update_buffer(buffer.mirror())

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter:
            return
        normalized = self._normalize_key(event)
        if normalized is None:
            return
        key, text, modifiers = normalized
        self.adapter.handle_textual_key(key, text=text, modifiers=modifiers)
        event.stop()

    def _update_buffer(self, mirror: BufferMirror) -> None:
        if not self._buffer_widget or self.manager is None:
            return
        buffer = self.manager.context.buffer
        rendered = render_mirror(mirror, buffer.char_offset(mirror.cursor))
        top = buffer.scroll_offset()
        lines = rendered.split("\n", allow_blank=True)
        visible = lines[top : top + buffer.viewport_height()]
        self._buffer_widget.update(Text("\n").join(visible))

    def _update_status(self, status: str) -> None:
        if self._status_widget:
            self._status_widget.update(status)

    def _show_command(self, command: str) -> None:
        if self._command_widget:
            self._command_widget.update(command)

    def _handle_event(self, name: str, payload: Any | None) -> None:
        if name == "search.error" and isinstance(payload, dict):
            self.notify(f"bad pattern: {payload.get('pattern', '')}", severity="error")
        elif name == "mode.switch" and isinstance(payload, str):
            self.logger.debug(f"mode -> {payload}")

    @staticmethod
    def _normalize_key(
        event: events.Key,
    ) -> Optional[Tuple[str, Optional[str], Tuple[str, ...]]]:
        key = event.key
        if key == "ctrl+q":
            return None
        if key.startswith("ctrl+") and len(key) == len("ctrl+") + 1:
            return (key[-1], None, ("CTRL",))
        named = {
            "escape": "ESC",
            "enter": "ENTER",
            "return": "ENTER",
            "backspace": "BACKSPACE",
            "delete": "DELETE",
            "tab": "TAB",
        }.get(key)
        if named is not None:
            return (named, None, ())
        if event.character and event.character.isprintable():
            return (event.character, event.character, ())
        return (key.upper(), None, ())


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the vi engine Textual demo.")
    parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Load the initial buffer text from this file",
    )
    parser.add_argument(
        "--viewport-height",
        type=int,
        default=None,
        help="Rows the engine treats as visible (default: follow the window size)",
    )
    parser.add_argument(
        "--preset",
        choices=("development", "production", "quiet"),
        default=None,
        help="telelog preset to log with (default: configured from VI_ENGINE_* variables)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.preset:
        telemetry.configure(preset=args.preset)
    text = args.file.read_text(encoding="utf-8") if args.file else ""
    app = ViEngineApp(text=text, viewport_height=args.viewport_height)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
