"""
Centralized Logging

Architectural Intent:
- Provides structured JSON logging for all driver components
- Centralizes log configuration to avoid scattered print() calls
- Supports configurable log levels via CLI flags (--verbose, --debug)
"""

import json
import logging
import sys
from datetime import datetime, UTC

ROOT_LOGGER = "onmetal_driver"

# Keys passed through `extra=` that are copied into JSON records.
CONTEXT_FIELDS = ("operation", "machine", "machine_class", "code", "duration_ms")


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(
    level: int = logging.INFO,
    json_format: bool = False,
) -> None:
    """Configure logging for the driver.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, etc.)
        json_format: If True, use JSON structured output. Otherwise human-readable.
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)

    # Remove existing handlers
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )

    root.addHandler(handler)
