"""Process-wide structured logging configuration."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

_DEFAULT_LEVEL = "INFO"

_RESERVED_ATTRS = frozenset(
    {
        "args",
        "exc_info",
        "exc_text",
        "message",
        "msg",
        "levelno",
        "levelname",
        "name",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "stack_info",
        "taskName",
    }
)


class JsonFormatter(logging.Formatter):
    """Render log records as JSON for easier ingestion."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Merge extra properties if they are simple types
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            try:
                json.dumps(value)
                payload[key] = value
            except (TypeError, ValueError):
                payload[key] = repr(value)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)


def _resolve_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName((level or _DEFAULT_LEVEL).upper())
    if isinstance(numeric, str):
        # getLevelName echoes unknown names back as "Level X"
        return logging.INFO
    return numeric


def configure_logging(level: str | int | None = None) -> None:
    """Configure the root logger with the JSON formatter.

    Repeated calls only adjust the level so handlers are never duplicated.
    """

    root = logging.getLogger()
    if level is not None or not getattr(root, "_structured_configured", False):
        root.setLevel(_resolve_level(level))
    if getattr(root, "_structured_configured", False):  # type: ignore[attr-defined]
        return

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.handlers.clear()
    root.addHandler(handler)

    root._structured_configured = True  # type: ignore[attr-defined]


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
