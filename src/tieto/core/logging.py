"""
Logging utilities for Tieto.

Provides human-readable or JSON-structured log output for the `tieto`
package logger, plus a query context that tags records with the topic and
query ID of the call that emitted them.
"""

import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional


PACKAGE_LOGGER = "tieto"

CONTEXT_FIELDS = ("query_id", "topic", "document")


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs JSON-structured log lines.

    Each log line includes the level, logger, message, optional timestamp,
    any query context fields, and exception text when present.
    """

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_timestamp:
            log_entry["timestamp"] = datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat()

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Format: TIMESTAMP - LOGGER - LEVEL - MESSAGE [topic=X query_id=Y]
    """

    def __init__(self, include_timestamp: bool = True):
        if include_timestamp:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            fmt = "%(name)s - %(levelname)s - %(message)s"
        super().__init__(fmt)

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)

        context_parts = []
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                context_parts.append(f"{field}={value}")

        if context_parts:
            return f"{base} [{' '.join(context_parts)}]"
        return base


class QueryContextFilter(logging.Filter):
    """Copies the active QueryContext onto every record passing the handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in QueryContext.get_current().items():
            if getattr(record, key, None) is None:
                setattr(record, key, value)
        return True


def configure_logging(
    level: int = logging.INFO,
    structured: bool = False,
    include_timestamp: bool = True,
    stream=None,
) -> logging.Logger:
    """
    Configure the `tieto` package logger.

    Adds a single stream handler (stderr by default); calling it again only
    updates the level.

    Args:
        level: Logging level (default: INFO)
        structured: If True, output JSON lines; otherwise human-readable
        include_timestamp: Whether to include timestamps
        stream: Output stream override

    Returns:
        The package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)

    if not package_logger.handlers:
        handler = logging.StreamHandler(stream or sys.stderr)
        if structured:
            handler.setFormatter(StructuredFormatter(include_timestamp=include_timestamp))
        else:
            handler.setFormatter(HumanReadableFormatter(include_timestamp=include_timestamp))
        handler.addFilter(QueryContextFilter())
        package_logger.addHandler(handler)

    for handler in package_logger.handlers:
        handler.setLevel(level)

    return package_logger


class QueryContext:
    """
    Context manager tagging log records with query fields.

    Example:
        >>> with QueryContext(topic="acme-corp"):
        ...     logger.info("Scanning topic")  # includes topic and query_id
    """

    _current: Optional["QueryContext"] = None

    def __init__(
        self,
        topic: Optional[str] = None,
        query_id: Optional[str] = None,
        **extra: Any,
    ):
        self.query_id = query_id or uuid.uuid4().hex[:12]
        self.context = {"query_id": self.query_id, "topic": topic, **extra}
        self.context = {k: v for k, v in self.context.items() if v is not None}
        self._previous: Optional["QueryContext"] = None

    def __enter__(self) -> "QueryContext":
        self._previous = QueryContext._current
        QueryContext._current = self
        return self

    def __exit__(self, *args) -> None:
        QueryContext._current = self._previous

    @classmethod
    def get_current(cls) -> Dict[str, Any]:
        """Get the current query context."""
        if cls._current is None:
            return {}
        return cls._current.context.copy()
