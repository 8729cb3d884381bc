"""
Logging helpers for the vehicle store.

Modules log through ``logging.getLogger(__name__)``. Records about one
vehicle go through ``VehicleLoggerAdapter`` so they carry its license
number as a field, and ``configure_structured_logging`` turns the package
output into one JSON object per line with those fields included.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import MutableMapping
from datetime import datetime, timezone
from typing import IO, Any

from .models import Vehicle

# Attributes every LogRecord has; anything else arrived through ``extra``
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


class StructuredJsonFormatter(logging.Formatter):
    """
    Formats a record as a single-line JSON object.

    Fields: ``timestamp`` (UTC, from the record's creation time), ``level``,
    ``logger``, ``message``, ``exception`` when present, plus any context
    passed through ``extra`` such as ``license_number``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key.startswith("_"):
                continue
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                value = str(value)
            log_obj[key] = value

        return json.dumps(log_obj)


def configure_structured_logging(
    level: int = logging.INFO,
    stream: IO[str] | None = None,
    logger_name: str = "vehicle_store",
) -> logging.Logger:
    """
    Send the package's log records to ``stream`` as JSON lines.

    Calling it again replaces the previous handler instead of adding one.

    Args:
        level: Logging level (default: INFO)
        stream: Destination (default: stdout)
        logger_name: Logger to configure (default: the package logger)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())

    logger.addHandler(handler)
    logger.setLevel(level)

    return logger


class VehicleLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that tags every record with a vehicle's license number."""

    def __init__(self, logger: logging.Logger, vehicle: Vehicle, **context: Any):
        super().__init__(logger, {"license_number": vehicle.license_number, **context})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs
