"""Mode manager coordinating Normal/Insert/Visual and dispatching key events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Type

from vi_engine.buffer import Cursor
from vi_engine.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult
from .insert_mode import InsertMode
from .normal_mode import NormalMode
from .visual_mode import VisualMode


@dataclass(slots=True)
class StatusInfo:
    """What a host shows in its status line."""

    mode: str
    command: str
    cursor: Cursor
    message: Optional[str] = None


class ModeManager:
    """Owns the active mode, handles transitions, and dispatches key events.

    Keys are handled strictly one at a time: a mode switch requested by a
    result is fully applied before ``handle_key`` returns.
    """

    def __init__(self, context: ModeContext) -> None:
        self.context = context
        self._modes: Dict[str, Mode] = {}
        self._active: Optional[str] = None
        self._message: Optional[str] = None
        self.logger = telemetry.get_logger("vi_engine.modes")
        self.context.extras.setdefault("mode_manager", self)

    @classmethod
    def with_default_modes(cls, context: ModeContext) -> "ModeManager":
        """Manager with Normal (active), Insert and Visual registered."""

        manager = cls(context)
        manager.register_mode(NormalMode)
        manager.register_mode(InsertMode)
        manager.register_mode(VisualMode)
        return manager

    @property
    def active_mode(self) -> Optional[Mode]:
        if self._active is None:
            return None
        return self._modes.get(self._active)

    def register_mode(
        self,
        mode_cls: Type[Mode],
        /,
        *mode_args: object,
        **mode_kwargs: object,
    ) -> Mode:
        mode = mode_cls(self.context, *mode_args, **mode_kwargs)
        if mode.name in self._modes:
            raise ValueError(f"Mode '{mode.name}' already registered")
        self._modes[mode.name] = mode
        if self._active is None:
            self._active = mode.name
            mode.on_enter(None)
        return mode

    def switch_mode(self, name: str) -> None:
        if name not in self._modes:
            raise KeyError(f"Unknown mode '{name}'")
        previous = self.active_mode
        if previous and previous.name == name:
            return
        if previous:
            previous.on_exit(name)
        self._active = name
        self._modes[name].on_enter(previous.name if previous else None)
        telemetry.record_event(
            "mode.switch",
            data={"mode": name, "previous": previous.name if previous else None},
            logger_name="vi_engine.modes",
        )
        self.context.bus.emit("mode.switch", name)

    def handle_key(self, key: KeyInput) -> ModeResult:
        mode = self.active_mode
        if mode is None:
            raise RuntimeError("No active mode registered")
        with telemetry.span(
            name=f"mode::{mode.name}",
            component=True,
            metadata={"key": key.key, "mode": mode.name},
        ):
            result = mode.handle_key(key)
        return self._after_mode_result(result)

    def _after_mode_result(self, result: ModeResult) -> ModeResult:
        self._message = result.message if result.status != "pending" else None
        if result.switch_to:
            self.switch_mode(result.switch_to)
        return result

    def status(self) -> StatusInfo:
        mode = self.active_mode
        if mode is None:
            raise RuntimeError("No active mode registered")
        return StatusInfo(
            mode=mode.name,
            command=mode.pending,
            cursor=self.context.buffer.cursor(),
            message=self._message,
        )


__all__ = ["ModeManager", "StatusInfo"]
