"""Engine configuration sourced from defaults and ``VI_ENGINE_*`` variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "VI_ENGINE_"


def _env(
    name: str,
    default: Optional[str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    source = os.environ if environ is None else environ
    return source.get(f"{ENV_PREFIX}{name}", default)


def _env_int(
    name: str, fallback: int, *, environ: Optional[Mapping[str, str]] = None
) -> int:
    value = _env(name, environ=environ)
    if value is None:
        return fallback
    try:
        parsed = int(value)
    except ValueError:
        return fallback
    return parsed if parsed > 0 else fallback


def env_flag(
    name: str, default: bool, *, environ: Optional[Mapping[str, str]] = None
) -> bool:
    raw = _env(name, environ=environ)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Tunables shared by the buffer, history registry and editing verbs."""

    jump_capacity: int = 100
    change_capacity: int = 100
    shiftwidth: int = 4
    tab_text: str = "\t"
    viewport_height: int = 24

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        defaults = cls()
        tab_text = _env("TAB_TEXT", environ=environ)
        return cls(
            jump_capacity=_env_int(
                "JUMP_CAPACITY", defaults.jump_capacity, environ=environ
            ),
            change_capacity=_env_int(
                "CHANGE_CAPACITY", defaults.change_capacity, environ=environ
            ),
            shiftwidth=_env_int("SHIFTWIDTH", defaults.shiftwidth, environ=environ),
            tab_text=tab_text if tab_text else defaults.tab_text,
            viewport_height=_env_int(
                "VIEWPORT_HEIGHT", defaults.viewport_height, environ=environ
            ),
        )


__all__ = ["ENV_PREFIX", "EngineConfig", "env_flag"]
