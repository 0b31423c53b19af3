"""Logging setup with context fields.

Library modules log through ``logging.getLogger(__name__)``. Applications
call ``setup_logging`` (or ``setup_logging_from_config``) once. Structured
fields come from two places and are rendered by every formatter:

- ``LogContext`` blocks, e.g. the algorithm and length group of a duplicate
  search. Fields live in a context variable, so concurrent threads keep
  their own.
- The ``context`` of an ``ImprintError`` logged with ``exc_info``
  (file path, errno, expected/actual byte counts).
"""

import json
import logging
import logging.handlers
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ImprintError
from .logging_config import LoggingConfig

_log_fields: ContextVar[Optional[Dict[str, Any]]] = ContextVar("file_imprint_log_fields", default=None)


def current_log_fields() -> Dict[str, Any]:
    """Fields of the innermost active ``LogContext``."""
    return dict(_log_fields.get() or {})


class LogContext:
    """Attach fields to every record logged inside the block.

    Contexts nest; inner fields override outer fields with the same name.
    """

    def __init__(self, **fields: Any) -> None:
        self.fields = fields
        self._token = None

    def __enter__(self) -> "LogContext":
        self._token = _log_fields.set({**current_log_fields(), **self.fields})
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        _log_fields.reset(self._token)


class ContextFieldFilter(logging.Filter):
    """Copy active ``LogContext`` fields onto each record as ``log_fields``."""

    def filter(self, record: logging.LogRecord) -> bool:
        fields = current_log_fields()
        if fields:
            record.log_fields = {**getattr(record, "log_fields", {}), **fields}
        return True


def _error_context(record: logging.LogRecord) -> Optional[Dict[str, Any]]:
    if record.exc_info and isinstance(record.exc_info[1], ImprintError):
        return record.exc_info[1].context
    return None


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, fields under ``context``."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        fields = getattr(record, "log_fields", None)
        if fields:
            log_data["context"] = fields

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }
            error_context = _error_context(record)
            if error_context:
                log_data["exception"]["context"] = error_context

        return json.dumps(log_data, default=str)


class _FieldsFormatter(logging.Formatter):
    """Text formatter appending context fields in ``{'key': value}`` form."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = dict(getattr(record, "log_fields", None) or {})
        fields.update(_error_context(record) or {})
        if not fields:
            return line
        # Keep the traceback, if any, after the fields
        first, sep, rest = line.partition("\n")
        return f"{first} | {fields!r}{sep}{rest}"


class DetailedFormatter(_FieldsFormatter):
    """Text formatter with timestamp and source location."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


class SimpleFormatter(_FieldsFormatter):
    """Compact console formatter."""

    def __init__(self) -> None:
        super().__init__(fmt="%(levelname)-8s | %(name)s | %(message)s")


_FORMATTERS = {
    "json": StructuredFormatter,
    "detailed": DetailedFormatter,
    "simple": SimpleFormatter,
}


def setup_logging(
    level: str = "INFO",
    format: str = "simple",
    log_file: Optional[Path] = None,
    max_file_size_mb: int = 10,
    backup_count: int = 5,
) -> None:
    """Configure the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Console format (simple, detailed, json)
        log_file: Optional log file path; file output is always JSON
        max_file_size_mb: Rotate the log file after this many MB
        backup_count: Number of rotated files to keep
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    context_filter = ContextFieldFilter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(_FORMATTERS.get(format, SimpleFormatter)())
    console_handler.addFilter(context_filter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(StructuredFormatter())
        file_handler.addFilter(context_filter)
        root_logger.addHandler(file_handler)


def setup_logging_from_config(config: LoggingConfig) -> None:
    """Configure logging from a ``LoggingConfig``."""
    setup_logging(
        level=config.level,
        format=config.format,
        log_file=config.file,
        max_file_size_mb=config.max_file_size_mb,
        backup_count=config.backup_count,
    )
