"""
Logging for the Fren core.

Every request handled by the dispatcher runs inside a ``CorrelationContext``
carrying its request id, origin and method. ``log_with_context`` copies
those fields onto the log record, and both formatters here render them:
JSON lines for log shippers, or a suffix like
``[request_id=... origin=... method=...]`` for terminals.

Results are printed on stdout by the CLI, so logs always go to stderr.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


CORRELATION_FIELDS = ("request_id", "origin", "method", "correlation_id")

# Shown by the terminal formatter; the JSON formatter emits every correlation field
_SUFFIX_FIELDS = ("request_id", "origin", "method")

PACKAGE_LOGGER = "fren"


def _record_fields(record: logging.LogRecord, names) -> Dict[str, Any]:
    """Correlation attributes present on ``record``, in ``names`` order."""
    fields = {}
    for name in names:
        value = getattr(record, name, None)
        if value is not None:
            fields[name] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per record.

    Keys: level, logger, message, optional timestamp (UTC, ISO 8601), any
    correlation fields, the request ``state`` when a transition is logged,
    and the formatted traceback under ``exception``.
    """

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.include_timestamp:
            created = datetime.fromtimestamp(record.created, tz=timezone.utc)
            entry["timestamp"] = created.isoformat()

        entry.update(_record_fields(record, CORRELATION_FIELDS + ("state",)))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Plain log line followed by a ``[key=value ...]`` correlation suffix."""

    def __init__(self, include_timestamp: bool = True):
        fmt = "%(name)s - %(levelname)s - %(message)s"
        if include_timestamp:
            fmt = "%(asctime)s - " + fmt
        super().__init__(fmt)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = _record_fields(record, _SUFFIX_FIELDS)
        if not fields:
            return line
        suffix = " ".join(f"{name}={value}" for name, value in fields.items())
        return f"{line} [{suffix}]"


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Return the logger ``name``, optionally forcing its level."""
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def configure_logging(
    level: int = logging.INFO,
    include_timestamp: bool = True,
    structured: bool = False,
    stream=None,
) -> logging.Logger:
    """
    Attach a stream handler to the ``fren`` package logger.

    Safe to call more than once: a second call only changes the level of
    the logger and of its existing handlers.

    Args:
        level: Logging level
        include_timestamp: Prefix lines (or add a key) with the record time
        structured: JSON lines instead of human-readable lines
        stream: Destination stream, stderr by default

    Returns:
        The ``fren`` package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)

    if package_logger.handlers:
        for existing in package_logger.handlers:
            existing.setLevel(level)
        return package_logger

    formatter_class = StructuredFormatter if structured else HumanReadableFormatter
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter_class(include_timestamp=include_timestamp))
    package_logger.addHandler(handler)
    return package_logger


class CorrelationContext:
    """
    Correlation fields for everything logged inside a ``with`` block.

    Contexts nest; leaving the inner block restores the outer fields.

    Example:
        >>> with CorrelationContext(request_id="abc", origin="https://example.org"):
        ...     log_with_context(logger, logging.INFO, "Handling request")
    """

    _stack: List["CorrelationContext"] = []

    def __init__(
        self,
        request_id: Optional[str] = None,
        origin: Optional[str] = None,
        method: Optional[str] = None,
        **extra: Any,
    ):
        fields = dict(request_id=request_id, origin=origin, method=method, **extra)
        self.context = {name: value for name, value in fields.items() if value is not None}

    def __enter__(self) -> "CorrelationContext":
        CorrelationContext._stack.append(self)
        return self

    def __exit__(self, *args) -> None:
        CorrelationContext._stack.remove(self)

    @classmethod
    def get_current(cls) -> Dict[str, Any]:
        """Fields of the innermost active context (a copy)."""
        if not cls._stack:
            return {}
        return dict(cls._stack[-1].context)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **extra: Any,
) -> None:
    """
    Log ``message`` with the active correlation fields attached.

    Keyword arguments are added to the record too, overriding context
    fields of the same name.
    """
    fields = CorrelationContext.get_current()
    fields.update(extra)
    logger.log(level, message, extra=fields)
