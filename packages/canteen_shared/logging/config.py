"""Stdout logging configuration for Canteen processes.

The root logger gets one stdout handler and uvicorn's loggers are routed into
it, so request access lines and service records share one format. Structured
fields come from the bound logging context plus any ``extra=`` key listed in
``fields.STRUCTURED_FIELDS``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from packages.canteen_shared.config import LoggingSettings

from . import fields
from .context import bind_context, get_context

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class ContextFilter(logging.Filter):
    """Attach a snapshot of the bound logging context to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = get_context()
        return True


def structured_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Merge ``extra=`` structured keys under the record's bound context."""
    values: dict[str, Any] = {
        key: record.__dict__[key]
        for key in fields.STRUCTURED_FIELDS
        if record.__dict__.get(key) is not None
    }
    context = getattr(record, "context", None)
    if isinstance(context, dict):
        values.update(context)
    return values


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.fromtimestamp(record.created, UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
            **structured_fields(record),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


class PlainFormatter(logging.Formatter):
    """Terminal-friendly line with structured fields appended as ``k=v``."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-7s %(name)s %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        extra = structured_fields(record)
        if not extra:
            return message
        return message + " " + " ".join(f"{k}={v}" for k, v in sorted(extra.items()))


def configure_logging(settings: LoggingSettings) -> None:
    """Install the stdout handler and seed the process-wide context.

    Repeated calls replace the handler instead of stacking duplicates.
    """
    level = settings.level
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setLevel(level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if settings.json_output else PlainFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)

    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    bind_context(
        **{fields.SERVICE: settings.service, fields.ENVIRONMENT: settings.environment}
    )


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a stdlib logger from the standard hierarchy."""
    return logging.getLogger(name)
