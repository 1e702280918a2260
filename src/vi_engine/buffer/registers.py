"""Register storage and clipboard integration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

CLIPBOARD = "*"
UNNAMED = '"'
SEARCH = "/"

REGISTER_TYPES = frozenset({"character", "line", "block"})


@dataclass(slots=True)
class RegisterValue:
    text: str
    type: str = "character"  # character, line or block


class RegisterBank:
    """Tracks the unnamed, named (a-z), search and clipboard registers.

    Writes to any register other than ``/`` also land in the unnamed
    register. The ``*`` register is routed through ``clipboard_get`` /
    ``clipboard_set``, which hosts override to reach a real clipboard.
    """

    def __init__(self) -> None:
        self._registers: Dict[str, RegisterValue] = {}
        self._registers[UNNAMED] = RegisterValue(text="")

    def get(self, name: str) -> RegisterValue:
        if name == CLIPBOARD:
            text = self.clipboard_get()
            if text is not None:
                cached = self._registers.get(CLIPBOARD)
                kind = cached.type if cached and cached.text == text else "character"
                return RegisterValue(text=text, type=kind)
        return self._registers.get(name, RegisterValue(text=""))

    def set(self, name: str, value: RegisterValue) -> None:
        if value.type not in REGISTER_TYPES:
            raise ValueError(f"Unknown register type '{value.type}'")
        self._registers[name] = value
        if name == CLIPBOARD:
            self.clipboard_set(value.text)
        if name not in (UNNAMED, SEARCH):
            self._registers[UNNAMED] = value

    def yank_to(
        self, name: str, text: str, *, register_type: str = "character"
    ) -> None:
        self.set(name, RegisterValue(text=text, type=register_type))

    def clipboard_get(self) -> Optional[str]:  # stub, host adapters override
        return None

    def clipboard_set(self, value: str) -> None:  # stub, host adapters override
        _ = value
