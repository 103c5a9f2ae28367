"""
ScopeGate Logging Setup

Plain text or structured JSON logs on stderr for the "scopegate" logger
hierarchy.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from .config import Settings

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Extra fields copied into JSON log entries when present on the record
EXTRA_FIELDS = ("session_id", "risk_label", "risk_score", "config_hash", "persisted", "path")


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in EXTRA_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def configure_logging(
    settings: Settings,
    stream=None,
    level: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the "scopegate" logger once.

    Args:
        settings: Provides log level and format
        stream: Output stream (stderr by default)
        level: Overrides settings.log_level

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("scopegate")
    logger.setLevel(getattr(logging, (level or settings.log_level).upper(), logging.INFO))

    for existing in list(logger.handlers):
        if getattr(existing, "_scopegate_handler", False):
            logger.removeHandler(existing)

    handler = logging.StreamHandler(stream)
    if settings.log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    handler._scopegate_handler = True
    logger.addHandler(handler)
    return logger
