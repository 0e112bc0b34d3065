"""
Structured logging for the records services.

Every record write (and every rejected write) is logged as one JSON object
so the log can be replayed next to the audit trail.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


class StructuredLogger:
    """Emit ``{"timestamp", "level", "service", "message", **fields}`` lines."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

        # Module loggers are created once per import; keep a single handler
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter("%(message)s"))
            self.logger.addHandler(handler)

    def _emit(self, level: int, message: str, fields: dict):
        if not self.logger.isEnabledFor(level):
            return
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": logging.getLevelName(level),
            "service": self.logger.name,
            "message": message,
            **fields,
        }
        # Ids, dates and enums are not JSON native
        self.logger.log(level, json.dumps(record, default=str))

    def info(self, message: str, **fields):
        self._emit(logging.INFO, message, fields)

    def warning(self, message: str, **fields):
        self._emit(logging.WARNING, message, fields)


def get_logger(service_name: str) -> StructuredLogger:
    """Logger for one service module, usually called with ``__name__``."""
    return StructuredLogger(service_name)
