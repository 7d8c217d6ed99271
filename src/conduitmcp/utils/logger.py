# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Logging setup for ConduitMCP.

Everything here sits on the standard :mod:`logging` package.  Components log
through ``conduitmcp.<component>`` loggers and attach machine-readable context
with ``extra={"event": "...", ...}``; the formatters below surface that
context either as a trailing ``key=value`` list (terminal) or as a nested
``context`` object (JSON lines).

Environment overrides:

* ``CONDUITMCP_LOG_LEVEL`` - level name or number, default ``INFO``.
* ``CONDUITMCP_LOG_JSON`` - emit JSON lines when truthy.
* ``NO_COLOR`` - disable ANSI colors.
"""

from __future__ import annotations

from collections.abc import Callable
import json
import logging
import os
from typing import Any, ClassVar, Final


RESET: Final[str] = "\033[0m"
DIM: Final[str] = "\033[2m"
LOGGER_COLOR: Final[str] = "\033[94m"

DEFAULT_LOGGER_NAME: Final[str] = "conduitmcp"
ENV_LOG_LEVEL: Final[str] = "CONDUITMCP_LOG_LEVEL"
ENV_LOG_JSON: Final[str] = "CONDUITMCP_LOG_JSON"
ENV_NO_COLOR: Final[str] = "NO_COLOR"
DEFAULT_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT: Final[str] = "%Y-%m-%d %H:%M:%S"

JsonSerializer = Callable[[dict[str, Any]], str]
PayloadTransformer = Callable[[dict[str, Any]], dict[str, Any]]

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS: Final[frozenset[str]] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "context", "taskName"}


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Collect the ``extra`` fields attached to ``record``.

    A ``context`` mapping passed through ``extra`` is flattened into the result.
    """
    context: dict[str, Any] = {}
    nested = getattr(record, "context", None)
    if isinstance(nested, dict):
        context.update(nested)
    for key, value in record.__dict__.items():
        if key in _RESERVED_ATTRS or key.startswith("_"):
            continue
        context.setdefault(key, value)
    return context


class ConduitMCPHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """Stream handler installed by :func:`setup_logger`.

    Its type marks the handler as ours so repeated setup calls stay idempotent.
    """


class EventFormatter(logging.Formatter):
    """Plain-text formatter that appends ``extra`` context as ``key=value``."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        rendered = " ".join(f"{key}={value!r}" for key, value in sorted(context.items()))
        return f"{line} {self._decorate_context(rendered)}"

    def _decorate_context(self, rendered: str) -> str:
        return rendered


class ColoredFormatter(EventFormatter):
    """:class:`EventFormatter` with ANSI colors for level and logger name."""

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[1;31m",
        "CRITICAL": "\033[1;35m",
    }

    def format(self, record: logging.LogRecord) -> str:
        levelname, name = record.levelname, record.name
        record.levelname = f"{self.LEVEL_COLORS.get(levelname, '')}{levelname}{RESET}"
        record.name = f"{LOGGER_COLOR}{name}{RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname, record.name = levelname, name

    def _decorate_context(self, rendered: str) -> str:
        return f"{DIM}{rendered}{RESET}"


class StructuredJSONFormatter(logging.Formatter):
    """Serialize records as one JSON object per line."""

    def __init__(
        self,
        serializer: JsonSerializer | None = None,
        *,
        datefmt: str | None = None,
        payload_transformer: PayloadTransformer | None = None,
    ) -> None:
        super().__init__(datefmt=datefmt)
        self._serializer = serializer or _default_json_serializer
        self._transformer = payload_transformer

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = record_context(record)
        event = context.pop("event", None)
        if event is not None:
            payload["event"] = event
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        if self._transformer is not None:
            payload = self._transformer(payload)
        return self._serializer(payload)


def _default_json_serializer(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, default=repr)


def _read_bool_env(key: str) -> bool:
    value = os.getenv(key)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv(ENV_LOG_LEVEL) or logging.INFO
    if isinstance(level, int):
        return level
    text = str(level).strip()
    if text.isdigit():
        return int(text)
    resolved = logging.getLevelName(text.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _installed_handlers(root: logging.Logger) -> list[ConduitMCPHandler]:
    return [handler for handler in root.handlers if isinstance(handler, ConduitMCPHandler)]


def setup_logger(
    *,
    level: int | str | None = None,
    use_json: bool | None = None,
    use_color: bool | None = None,
    json_serializer: JsonSerializer | None = None,
    payload_transformer: PayloadTransformer | None = None,
    fmt: str | None = None,
    datefmt: str | None = DEFAULT_DATEFMT,
    force: bool = False,
) -> None:
    """Attach a :class:`ConduitMCPHandler` to the root logger.

    Args:
        level: Log level; falls back to ``CONDUITMCP_LOG_LEVEL`` then ``INFO``.
        use_json: JSON-lines output; defaults to ``CONDUITMCP_LOG_JSON``.
        use_color: ANSI colors; defaults to on unless ``NO_COLOR`` is set or
            JSON output is active.
        json_serializer: Replacement for :func:`json.dumps` in JSON mode.
        payload_transformer: Hook applied to each JSON payload before
            serialization.
        fmt: Plain-text format string.
        datefmt: Timestamp format.
        force: Replace a previously installed handler instead of keeping it.
    """
    root = logging.getLogger()
    existing = _installed_handlers(root)
    if existing and not force:
        return
    for handler in existing:
        root.removeHandler(handler)
        handler.close()

    resolved_level = _resolve_level(level)
    resolved_json = use_json if use_json is not None else _read_bool_env(ENV_LOG_JSON)
    if use_color is None:
        use_color = not resolved_json and not os.getenv(ENV_NO_COLOR)

    formatter: logging.Formatter
    if resolved_json:
        formatter = StructuredJSONFormatter(json_serializer, datefmt=datefmt, payload_transformer=payload_transformer)
    elif use_color:
        formatter = ColoredFormatter(fmt or DEFAULT_FORMAT, datefmt=datefmt)
    else:
        formatter = EventFormatter(fmt or DEFAULT_FORMAT, datefmt=datefmt)

    handler = ConduitMCPHandler()
    handler.setLevel(resolved_level)
    handler.setFormatter(formatter)
    root.setLevel(resolved_level)
    root.addHandler(handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``name`` (default ``conduitmcp``), installing the handler on first use."""
    if not _installed_handlers(logging.getLogger()):
        setup_logger()
    return logging.getLogger(name or DEFAULT_LOGGER_NAME)


def component_logger(component: str) -> logging.Logger:
    """Return the ``conduitmcp.<component>`` logger without installing a handler.

    Safe to call at import time; output appears once :func:`setup_logger` or
    :func:`get_logger` has run (``MCPServer`` does so on construction).
    """
    return logging.getLogger(f"{DEFAULT_LOGGER_NAME}.{component}")


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "ColoredFormatter",
    "ConduitMCPHandler",
    "EventFormatter",
    "StructuredJSONFormatter",
    "component_logger",
    "get_logger",
    "record_context",
    "setup_logger",
]
