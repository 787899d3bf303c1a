"""Structured logging for altmap, built on telelog.

Everything goes through one telelog config assembled from ``ALTMAP_*``
environment variables on first use. Callers use ``record_event`` for
one-off notices and ``span`` around registry, switch and loader operations.
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, MutableMapping, Optional, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "ALTMAP_"
ROOT_LOGGER = "altmap"

_loggers: MutableMapping[str, Any] = {}
_config: Optional[Any] = None


def env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def env_flag(name: str, default: bool) -> bool:
    raw = env(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _load_config() -> Any:
    global _config
    if _config is not None:
        return _config

    config = tl.Config()
    config.with_min_level((env("LOG_LEVEL") or "WARNING").upper())
    console = not env_flag("DISABLE_CONSOLE", False)
    config.with_console_output(console)
    if console:
        config.with_colored_output(not env_flag("NO_COLOR", False))
    config.with_json_format(env_flag("LOG_JSON", False))
    if env("LOG_FILE"):
        config.with_file_output(env("LOG_FILE"))
    config.with_profiling(True)

    _config = config
    return config


def get_logger(name: Optional[str] = None) -> Any:
    """Return the telelog logger for ``name``, creating it once."""

    key = name or ROOT_LOGGER
    logger = _loggers.get(key)
    if logger is None:
        logger = tl.Logger.with_config(key, _load_config())
        _loggers[key] = logger
    return logger


def _text(value: Any) -> str:
    if isinstance(value, (dict, list, tuple, set)):
        return repr(value)
    return str(value)


def _emit(logger: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    pairs = [(str(key), _text(value)) for key, value in payload.items()]
    structured = getattr(logger, f"{level}_with", None)
    if structured is not None:
        structured(message, pairs)
        return
    plain = getattr(logger, level, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {dict(pairs)}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Log ``event::<name>`` with ``data`` attached."""

    _emit(
        get_logger(logger_name),
        level.lower(),
        f"event::{name}",
        {"event": name, **(data or {})},
    )


@dataclass
class SpanHandle:
    """Collects metadata reported if the spanned block fails."""

    name: str
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile a block, tracking it under ``component`` when given.

    ``metadata`` stays on the logger context while the block runs. An
    exception escaping the block is logged as ``span::fail`` and re-raised.
    """

    log = get_logger(logger_name)
    handle = SpanHandle(name=name)
    for key, value in (metadata or {}).items():
        handle.add_metadata(key, value)

    with ExitStack() as stack:
        for key, value in handle.metadata.items():
            log.add_context(key, value)
            stack.callback(log.remove_context, key)
        if component:
            stack.enter_context(log.track_component(component))
        stack.enter_context(log.profile(name))
        try:
            yield handle
        except Exception as exc:
            _emit(
                log,
                "error",
                "span::fail",
                {"span": name, "reason": str(exc), **handle.metadata},
            )
            raise


__all__ = [
    "SpanHandle",
    "env",
    "env_flag",
    "get_logger",
    "record_event",
    "span",
]
