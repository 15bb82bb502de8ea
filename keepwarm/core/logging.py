"""Structured logging for KeepWarm.

Two sinks hang off the ``keepwarm`` logger:
    - console: one line per record, INFO and up (DEBUG with --debug)
    - file: one JSON object per line in keepwarm.log, rotated

Records carry their structured fields under ``extra={"context": {...}}``;
both sinks render them (contact_id first, since most records are about
a single contact).

Usage:
    from keepwarm.core.logging import get_logger, setup_logging

    setup_logging(log_dir, debug=False)  # Once, from the entry point
    logger = get_logger(__name__)

    logger.info("Contact snoozed", extra={"context": {"contact_id": "a1b2"}})
"""

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

ROOT_LOGGER_NAME = "keepwarm"

LOG_FILE_NAME = "keepwarm.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

_PRIORITY_KEYS = ("contact_id", "owner_id")


def _record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Context fields of a record, contact/owner ids first."""
    context = getattr(record, "context", None)
    if not context:
        return {}
    ordered = {key: context[key] for key in _PRIORITY_KEYS if key in context}
    ordered.update((key, value) for key, value in context.items() if key not in ordered)
    return ordered


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for the log file."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Returns:
            JSON string with timestamp (record time, UTC), level, logger,
            message, and context/exception when present
        """
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = _record_context(record)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Context may hold datetimes and enums
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Short human-readable line for the terminal."""

    def format(self, record: logging.LogRecord) -> str:
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        name = record.name
        if name.startswith(ROOT_LOGGER_NAME + "."):
            name = name[len(ROOT_LOGGER_NAME) + 1 :]

        line = f"{clock} {record.levelname[:4]:4s} {name}: {record.getMessage()}"
        context = _record_context(record)
        if context:
            line += " [" + ", ".join(f"{k}={v}" for k, v in context.items()) + "]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


_logging_initialized = False


def setup_logging(log_dir: Optional[Path] = None, debug: bool = False) -> Path:
    """Attach console and rotating JSON file handlers to the keepwarm logger.

    Only the first call has an effect; later calls return the same path.

    Args:
        log_dir: Directory for keepwarm.log. Defaults to ~/.keepwarm/logs
        debug: Show DEBUG records on the console too

    Returns:
        Path of the log file
    """
    global _logging_initialized

    if log_dir is None:
        log_dir = Path.home() / ".keepwarm" / "logs"
    log_file = log_dir / LOG_FILE_NAME

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    if _logging_initialized:
        for handler in root_logger.handlers:
            if isinstance(handler, RotatingFileHandler):
                return Path(handler.baseFilename)
        return log_file

    log_dir.mkdir(parents=True, exist_ok=True)
    root_logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    console_handler.setFormatter(ConsoleFormatter())
    root_logger.addHandler(console_handler)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(file_handler)

    _logging_initialized = True
    root_logger.debug(
        "Logging initialized",
        extra={"context": {"log_file": str(log_file), "debug": debug}},
    )
    return log_file


def reset_logging() -> None:
    """Detach and close the handlers added by setup_logging.

    Used primarily for testing.
    """
    global _logging_initialized
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    _logging_initialized = False


def get_logger(name: str) -> logging.Logger:
    """Get logger for module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger nested under the keepwarm logger
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
