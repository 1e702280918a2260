"""Insert mode: type into the buffer and record the keys for replay."""

from __future__ import annotations

from vi_engine import keys
from vi_engine.actions import display_all, end_insert, record_key
from vi_engine.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult, Outcome

_EDIT_KEYS = frozenset({"\n", "\t", keys.BS, keys.DEL})


class InsertMode(Mode):
    name = "insert"

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger("vi_engine.modes.insert")
        self._session = False

    def on_enter(self, previous: str | None) -> None:
        del previous
        self._session = True

    def on_exit(self, next_mode: str | None) -> None:
        del next_mode
        # leaving without Esc still closes the undo group
        self._finish()

    def _finish(self) -> None:
        if self._session:
            self._session = False
            end_insert(self.context)

    def handle_key(self, key: KeyInput) -> ModeResult:
        if keys.is_cancel(key):
            self._finish()
            display_all(self.context.buffer, self.context.vi)
            return ModeResult(
                consumed=True,
                switch_to="normal",
                status="exit_insert",
                outcome=Outcome.TEXT_CHANGED,
            )

        token = keys.key_to_token(key)
        if token is None or not (token.isprintable() or token in _EDIT_KEYS):
            return ModeResult(consumed=False, status="ignored", outcome=Outcome.CONTINUE)

        record_key(self.context, token)
        display_all(self.context.buffer, self.context.vi)
        self.context.buffer.scroll_cursor_to_visible()
        return ModeResult(consumed=True, status="insert", outcome=Outcome.TEXT_CHANGED)
