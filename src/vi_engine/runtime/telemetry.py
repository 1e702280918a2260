"""Structured logging and profiling for the vi engine, built on telelog.

The rest of the package only touches four names:

``configure(...)`` -- pick a preset or an explicit ``telelog.Config``
``get_logger(name)`` -- cached logger per dotted component name
``record_event(name, ...)`` -- one structured log line for a discrete event
``span(name, ...)`` -- profile a block, optionally tracked as a component
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, MutableMapping, Optional, Tuple, cast

import telelog  # type: ignore[import]

from vi_engine.config import ENV_PREFIX, env_flag

tl = cast(Any, telelog)

DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "vi_engine")

_LOGGERS: MutableMapping[str, Any] = {}
_CONFIG: Optional[Any] = None


def _setting(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple, set)):
        return repr(value)
    return str(value)


def _pairs(data: Dict[str, Any]) -> list[tuple[str, str]]:
    return [(str(key), _text(value)) for key, value in data.items()]


def _with_profiling(config: Any) -> Any:
    config.with_profiling(True)
    return config


def _preset(name: str) -> Any:
    config = tl.Config()
    key = name.lower()
    log_file = _setting("LOG_FILE")

    if key == "development":
        config.with_min_level("DEBUG")
        config.with_console_output(True)
        config.with_colored_output(True)
        config.with_json_format(False)
    elif key == "production":
        config.with_min_level("INFO")
        config.with_console_output(False)
        config.with_file_output(log_file or "vi_engine.log")
        config.with_buffering(True)
    elif key == "quiet":
        config.with_min_level("ERROR")
        config.with_console_output(False)
        if log_file:
            config.with_file_output(log_file)
    else:
        raise ValueError(f"Unknown telemetry preset '{name}'.")

    return _with_profiling(config)


def _from_environment() -> Any:
    config = tl.Config()
    config.with_min_level((_setting("LOG_LEVEL") or "WARNING").upper())

    console = not env_flag("DISABLE_CONSOLE", False)
    config.with_console_output(console)
    if console:
        config.with_colored_output(not env_flag("NO_COLOR", False))

    if env_flag("LOG_JSON", False):
        config.with_json_format(True)

    log_file = _setting("LOG_FILE")
    if log_file:
        config.with_file_output(log_file)

    if env_flag("LOG_BUFFERED", False):
        config.with_buffering(True)
        config.with_buffer_size(int(_setting("LOG_BUFFER_SIZE") or "2048"))

    return _with_profiling(config)


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Replace the active telelog configuration.

    ``config`` adopts an explicit ``telelog.Config``; ``preset`` selects one of
    ``"development"``, ``"production"`` or ``"quiet"``. Without either the
    configuration is rebuilt from ``VI_ENGINE_*`` variables. Cached loggers
    are dropped so the next ``get_logger`` picks up the change.
    """

    global _CONFIG
    if config is not None and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")

    if preset:
        _CONFIG = _preset(preset)
    elif config is not None:
        _CONFIG = _with_profiling(config)
    else:
        _CONFIG = _from_environment()
    _LOGGERS.clear()


def _active_config() -> Any:
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _from_environment()
    return _CONFIG


def get_logger(name: Optional[str] = None) -> Any:
    """Return the cached ``telelog.Logger`` for ``name``."""

    logger_name = name or DEFAULT_LOGGER_NAME
    logger = _LOGGERS.get(logger_name)
    if logger is None:
        logger = tl.Logger.with_config(logger_name, _active_config())
        _LOGGERS[logger_name] = logger
    return logger


def _level_method(logger: Any, level: Any) -> Tuple[Any, bool]:
    name = str(level).lower()
    structured = getattr(logger, f"{name}_with", None)
    if structured is not None:
        return structured, True
    plain = getattr(logger, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    return plain, False


def _emit(logger: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    method, structured = _level_method(logger, level)
    if structured:
        method(message, _pairs(payload))
    else:
        method(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Log a discrete engine event such as a mode switch or a search failure."""

    payload = {"event": name, **(data or {})}
    _emit(get_logger(logger_name), level, f"event::{name}", payload)


@dataclass
class SpanHandle:
    """Yielded by ``span``; lets the block attach metadata or flag failure."""

    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def fail(self, reason: str) -> None:
        payload: Dict[str, Any] = {"span": self.span_name, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        payload["reason"] = reason
        _emit(self.logger, "error", "span::fail", payload)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile a block and optionally track it as a telelog component.

    ``component=True`` reuses ``name`` as the component id, a string names it
    explicitly. ``metadata`` is pushed as logger context for the duration of
    the block and copied onto the handle.
    """

    log = get_logger(logger_name)
    if component is True:
        component_name: Optional[str] = name
    elif isinstance(component, str):
        component_name = component
    else:
        component_name = None

    pushed: list[str] = []
    serialized: Dict[str, str] = {}
    for key, value in (metadata or {}).items():
        serialized[key] = _text(value)
        log.add_context(key, serialized[key])
        pushed.append(key)

    with ExitStack() as stack:
        if component_name:
            stack.enter_context(log.track_component(component_name))
        stack.enter_context(log.profile(name))
        handle = SpanHandle(
            logger=log,
            span_name=name,
            component_name=component_name,
            metadata=dict(serialized),
        )
        try:
            yield handle
        except Exception as exc:
            handle.fail(str(exc))
            raise
        finally:
            for key in pushed:
                log.remove_context(key)


configure()
logger = get_logger()

__all__ = [
    "SpanHandle",
    "configure",
    "get_logger",
    "record_event",
    "span",
    "logger",
]
