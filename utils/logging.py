"""
Logging Utility - Structured JSON Logging

Provides centralized, structured logging configuration for all harvester components.
Supports JSON format for production and human-readable format for development.

Usage:
    from utils.logging import get_logger, setup_logging

    setup_logging(level="INFO", format_type="json")
    logger = get_logger(__name__)
    logger.info("Fetching page", extra={"page": 3, "total": 200})
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any

import orjson

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render log records as one JSON object per line.

    Fields passed through ``extra={...}`` are merged into the top-level object.
    Values orjson cannot serialize are rendered with ``str()``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return orjson.dumps(payload, default=str).decode("utf-8")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def setup_logging(
    level: str = "INFO",
    format_type: str = "json",
    output: str = "stdout",
) -> None:
    """Configure application-wide logging.

    Replaces any handlers on the root logger with a single stream handler.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Log format ('json' or 'text')
        output: Log output ('stdout' or 'stderr')

    Raises:
        ValueError: If format_type or output is not recognised
    """
    if format_type not in ("json", "text"):
        raise ValueError(f"Unknown log format: {format_type}")

    if output == "stdout":
        stream = sys.stdout
    elif output == "stderr":
        stream = sys.stderr
    else:
        raise ValueError(f"Unknown log output: {output}")

    handler = logging.StreamHandler(stream)
    if format_type == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
