"""Normal mode: feed keys to the command grammar and execute what it returns."""

from __future__ import annotations

from vi_engine import keys
from vi_engine.actions import display_all, execute_normal
from vi_engine.parser import Coroutine, Vim, normal_grammar
from vi_engine.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult, Outcome


class NormalMode(Mode):
    name = "normal"

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger("vi_engine.modes.normal")
        self._parser: Coroutine[Vim] = Coroutine(normal_grammar)

    def on_enter(self, previous: str | None) -> None:
        del previous
        self._reset()

    def on_exit(self, next_mode: str | None) -> None:
        del next_mode
        self._reset()

    @property
    def pending(self) -> str:
        return self._parser.display

    def _reset(self) -> None:
        self._parser = Coroutine(normal_grammar)

    def handle_key(self, key: KeyInput) -> ModeResult:
        buffer = self.context.buffer
        if keys.is_cancel(key):
            self._reset()
            display_all(buffer, self.context.vi)
            buffer.scroll_cursor_to_visible()
            return ModeResult(consumed=True, status="cancel", outcome=Outcome.CHANGED)

        token = keys.key_to_token(key)
        if token is None:
            return ModeResult(consumed=False, status="ignored", outcome=Outcome.CONTINUE)

        resumed = self._parser.resume(token)
        if resumed.pending or resumed.value is None:
            return ModeResult(consumed=True, status="pending", message=self.pending)
        if resumed.finished:
            self._reset()

        result = execute_normal(self.context, resumed.value)
        display_all(buffer, self.context.vi)
        buffer.scroll_cursor_to_visible()
        return result
