"""Base classes and shared utilities for editor modes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from vi_engine.buffer import RegisterBank, TextBuffer
from vi_engine.config import EngineConfig
from vi_engine.state import ViState


@dataclass(slots=True)
class KeyInput:
    """Normalized key event passed to modes."""

    key: str
    modifiers: Tuple[str, ...] = ()
    text: Optional[str] = None


class Outcome(Enum):
    """How much of the widget a key touched.

    ``CONTINUE``: the key was not for the engine. ``UNCHANGED``: consumed,
    nothing visible changed. ``CHANGED``: cursor, selection or highlights
    moved. ``TEXT_CHANGED``: the text itself was edited.
    """

    CONTINUE = "continue"
    UNCHANGED = "unchanged"
    CHANGED = "changed"
    TEXT_CHANGED = "text_changed"


@dataclass(slots=True)
class ModeResult:
    """Result returned from ``Mode.handle_key``."""

    consumed: bool
    switch_to: Optional[str] = None
    status: str = "ok"
    message: Optional[str] = None
    outcome: Outcome = Outcome.UNCHANGED


@dataclass(slots=True)
class ModeContext:
    """Shared services every mode can access."""

    buffer: TextBuffer
    registers: RegisterBank
    bus: "ModeBus"
    vi: ViState = field(default_factory=ViState)
    extras: Dict[str, object] = field(default_factory=dict)

    @classmethod
    def for_buffer(
        cls, buffer: TextBuffer, *, config: Optional[EngineConfig] = None
    ) -> "ModeContext":
        """Context sharing ``buffer``'s register bank and a fresh ``ViState``."""

        return cls(
            buffer=buffer,
            registers=buffer.registers,
            bus=ModeBus(),
            vi=ViState(config=config or buffer.config),
        )

    @property
    def config(self) -> EngineConfig:
        return self.vi.config


class ModeBus:
    """Minimal event bus letting modes exchange structured signals."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in self._subscribers.get(event, []):
            callback(payload)


class Mode:
    """Base class all concrete editor modes inherit from."""

    name: str = "mode"

    def __init__(self, context: ModeContext) -> None:
        self.context = context

    def on_enter(
        self, previous: Optional[str]
    ) -> None:  # pragma: no cover - default no-op
        del previous

    def on_exit(
        self, next_mode: Optional[str]
    ) -> None:  # pragma: no cover - default no-op
        del next_mode

    @property
    def pending(self) -> str:
        """Echo of the command being typed, for the status line."""

        return ""

    def handle_key(
        self, key: KeyInput
    ) -> ModeResult:  # pragma: no cover - abstract override
        raise NotImplementedError
