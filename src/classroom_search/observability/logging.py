"""Structured JSON logging for the search engine and CLI.

Log lines go to stderr so that CLI results on stdout stay machine readable.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import Any, TextIO

import orjson

from classroom_search.observability.context import get_search_context


# Attributes every LogRecord carries; anything else was passed via ``extra``.
_RESERVED_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}

PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JsonFormatter(logging.Formatter):
    """One orjson object per record, with bound search context and extras.

    Args:
        max_message_len: Messages longer than this are cut and end in "...".
        redact_keys: Extra field names whose values are never logged.
    """

    REDACT_KEYS = frozenset({"password", "token", "api_key", "secret", "authorization", "client_secret"})
    MAX_MESSAGE_LEN = 2000
    MAX_VALUE_LEN = 500

    def __init__(self, *, max_message_len: int | None = None, redact_keys: Iterable[str] | None = None) -> None:
        super().__init__()
        self.max_message_len = max_message_len or self.MAX_MESSAGE_LEN
        self.redact_keys = self.REDACT_KEYS | {key.lower() for key in redact_keys or ()}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": _clip(record.getMessage(), self.max_message_len),
        }
        # classroom_search.search.index -> index
        _, dot, component = record.name.rpartition(".")
        if dot:
            entry["component"] = component

        for key, value in get_search_context().items():
            entry[key] = self._scrub(key, value)

        for key, value in vars(record).items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            entry[key] = self._scrub(key, value)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return orjson.dumps(entry, default=_fallback).decode("utf-8")

    def _scrub(self, key: str, value: Any) -> Any:
        if key.lower() in self.redact_keys:
            return "[REDACTED]"
        if isinstance(value, str):
            return _clip(value, self.MAX_VALUE_LEN)
        return value


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def _fallback(value: Any) -> Any:
    """orjson ``default`` hook for values it cannot encode natively."""
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(value)
        except TypeError:
            return list(value)
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, BaseException):
        return f"{type(value).__name__}: {value}"
    return repr(value)


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    logger_levels: dict[str, str] | None = None,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Route all logging through a single handler on the root logger.

    Args:
        level: Root log level name; unknown names fall back to INFO.
        json_output: JSON lines when True, a plain text format otherwise.
        logger_levels: Per-logger level overrides (logger name -> level name).
        stream: Destination, stderr by default.

    Returns:
        The installed handler.
    """
    root = logging.getLogger()
    root.setLevel(_level(level, logging.INFO))
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(PLAIN_FORMAT))
    root.addHandler(handler)

    for name, name_level in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(_level(name_level, logging.INFO))
    return handler


def _level(name: str, default: int) -> int:
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else default
