"""Log output for ministate: plain text or JSON lines, both carrying the bound log context."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import Any, TextIO

import orjson
from pydantic import BaseModel

from ministate.observability.context import current_context


# Attributes every LogRecord carries; anything else came in through ``extra=``.
_STANDARD_RECORD_KEYS = frozenset(
    {
        *logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__,
        "message",
        "asctime",
        "taskName",
        "context",
    }
)

# Fields left out of plain-text lines; they only matter to log collectors.
_PLAIN_HIDDEN_FIELDS = frozenset({"trace_id", "span_id"})

PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class ContextFilter(logging.Filter):
    """Snapshot the bound log context onto each record as ``record.context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = current_context()
        return True


def _record_context(record: logging.LogRecord) -> dict[str, Any]:
    context = getattr(record, "context", None)
    return context if context is not None else current_context()


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def _json_default(value: Any) -> Any:
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(value)
        except TypeError:
            return list(value)
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    return repr(value)


class PlainFormatter(logging.Formatter):
    """Human-readable lines with bound fields appended as ``[app=Shop format=json]``."""

    def __init__(self, fmt: str = PLAIN_FORMAT) -> None:
        super().__init__(fmt)

    def formatMessage(self, record: logging.LogRecord) -> str:  # noqa: N802
        message = super().formatMessage(record)
        fields = {k: v for k, v in _record_context(record).items() if k not in _PLAIN_HIDDEN_FIELDS}
        if not fields:
            return message
        return f"{message} [{' '.join(f'{key}={value}' for key, value in fields.items())}]"


class JsonFormatter(logging.Formatter):
    """One orjson-encoded object per record.

    Bound context fields and ``extra=`` fields become top-level keys. Errors
    that carry a ``path`` (``DataIOError``, ``ParseError``) report it in the
    ``error`` object.
    """

    MAX_MESSAGE_LEN = 2000
    MAX_FIELD_LEN = 500

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": _truncate(record.getMessage(), self.MAX_MESSAGE_LEN),
        }
        entry.update(_record_context(record))

        if record.exc_info and record.exc_info[1] is not None:
            error = record.exc_info[1]
            entry["error"] = {
                "type": type(error).__name__,
                "message": str(error),
                "traceback": self.formatException(record.exc_info),
            }
            if (path := getattr(error, "path", None)) is not None:
                entry["error"]["path"] = str(path)

        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_KEYS or key.startswith("_"):
                continue
            entry[key] = _truncate(value, self.MAX_FIELD_LEN) if isinstance(value, str) else value

        return orjson.dumps(entry, default=_json_default, option=orjson.OPT_NON_STR_KEYS).decode("utf-8")


def configure_logging(
    level: str = "info",
    json_output: bool = False,
    *,
    logger_levels: dict[str, str] | None = None,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Replace the root logger's handlers with a single ministate handler.

    Args:
        level: Root log level name, case-insensitive
        json_output: Emit JSON lines instead of plain text
        logger_levels: Per-logger level overrides (logger name -> level name)
        stream: Output stream; stdout by default

    Returns:
        The installed handler
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if json_output else PlainFormatter())
    root.addHandler(handler)

    for logger_name, logger_level in (logger_levels or {}).items():
        logging.getLogger(logger_name).setLevel(getattr(logging, logger_level.upper(), logging.INFO))

    return handler
