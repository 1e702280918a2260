"""Key-token normalization shared by every mode."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover
    from vi_engine.modes.base_mode import KeyInput


def ctrl(char: str) -> str:
    """Return the control character produced by ``Ctrl`` + ``char``."""

    return chr(ord(char.lower()) & 0x1F)


BS = "\x08"
DEL = "\x7f"
ESC = "\x1b"
CTRL_B = ctrl("b")
CTRL_D = ctrl("d")
CTRL_E = ctrl("e")
CTRL_F = ctrl("f")
CTRL_I = ctrl("i")
CTRL_O = ctrl("o")
CTRL_R = ctrl("r")
CTRL_U = ctrl("u")
CTRL_V = ctrl("v")
CTRL_Y = ctrl("y")

_SYMBOLIC = {
    "ENTER": "\n",
    "RETURN": "\n",
    "<CR>": "\n",
    "BACKSPACE": BS,
    "<BS>": BS,
    "DELETE": DEL,
    "<DEL>": DEL,
    "TAB": "\t",
    "<TAB>": "\t",
    "SPACE": " ",
}

_CANCEL = {"ESC", "ESCAPE", "<ESC>"}


def _has_ctrl(key: "KeyInput") -> bool:
    return any(mod.upper() in {"CTRL", "CONTROL", "C"} for mod in key.modifiers)


def is_cancel(key: "KeyInput") -> bool:
    if key.key.upper() in _CANCEL or key.key == ESC:
        return True
    return _has_ctrl(key) and key.key.lower() == "c"


def key_to_token(key: "KeyInput") -> Optional[str]:
    """Collapse a ``KeyInput`` into the single-character token the grammars read.

    Returns ``None`` for keys the engine has no token for (function keys,
    arrows without a binding, bare modifiers).
    """

    name = key.key
    if _has_ctrl(key) and len(name) == 1 and name.isalpha():
        return ctrl(name)
    if name.startswith("ctrl+") and len(name) == 6:
        return ctrl(name[-1])
    symbolic = _SYMBOLIC.get(name.upper())
    if symbolic is not None:
        return symbolic
    if key.text and len(key.text) == 1:
        return key.text
    if len(name) == 1:
        return name
    return None


__all__ = [
    "BS",
    "DEL",
    "ESC",
    "CTRL_B",
    "CTRL_D",
    "CTRL_E",
    "CTRL_F",
    "CTRL_I",
    "CTRL_O",
    "CTRL_R",
    "CTRL_U",
    "CTRL_V",
    "CTRL_Y",
    "ctrl",
    "is_cancel",
    "key_to_token",
]
