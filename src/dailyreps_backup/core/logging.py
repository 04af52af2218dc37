"""Logging setup for the backup server.

Modules obtain loggers with `logging.getLogger(__name__)`; this module only
installs the handler and formatter on the package logger at startup.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

PACKAGE_LOGGER = "dailyreps_backup"


class StructuredFormatter(logging.Formatter):
    """JSON line formatter for log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


class DevelopmentFormatter(logging.Formatter):
    """Human-readable formatter for local development."""

    FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    def __init__(self) -> None:
        super().__init__(self.FORMAT, datefmt="%H:%M:%S")


def configure_logging(level: str = "INFO", json_output: bool = False) -> logging.Logger:
    """Attach a single stdout handler to the package logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Emit JSON lines instead of human-readable text.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if json_output else DevelopmentFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def short_id(identifier: str) -> str:
    """Return a log-safe prefix of a hex identifier."""
    return f"{identifier[:8]}..." if len(identifier) > 8 else identifier
