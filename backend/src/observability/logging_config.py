"""Structured JSON logging configuration.

Every record is stamped from the current RequestContext (request id, acting
user and role) before it is formatted.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from .context import NO_REQUEST_ID, current_context


# Structured context passed through `extra=` that is copied into JSON lines
CONTEXT_FIELDS = (
    "seller_id",
    "kyc_id",
    "doc_type",
    "doc_id",
    "attempt",
    "path",
    "user_id",
    "method",
    "status_code",
    "duration_ms",
)


class RequestContextFilter(logging.Filter):
    """Copy request_id, actor_id and actor_role onto every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = current_context()
        record.request_id = context.request_id if context else NO_REQUEST_ID
        record.actor_id = context.actor_id if context else None
        record.actor_role = context.actor_role if context else None
        return True


class JSONFormatter(logging.Formatter):
    """Format log records as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "request_id": getattr(record, "request_id", NO_REQUEST_ID),
            "logger": record.name,
            "function": record.funcName,
            "message": record.getMessage(),
        }

        if getattr(record, "actor_id", None):
            log_data["actor_id"] = record.actor_id
            log_data["actor_role"] = record.actor_role

        if record.exc_info:
            log_data["error"] = str(record.exc_info[1])
            log_data["traceback"] = self.formatException(record.exc_info)

        for field_name in CONTEXT_FIELDS:
            if hasattr(record, field_name):
                value = getattr(record, field_name)
                log_data[field_name] = value if isinstance(value, (int, float, bool)) else str(value)

        return json.dumps(log_data)


def configure_logging(level: str = "INFO", json_format: bool = True) -> None:
    """Configure application-wide logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, use JSON formatter; otherwise use simple format
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper()))

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(request_id)s - %(name)s - %(message)s'
        )

    handler.setFormatter(formatter)
    handler.addFilter(RequestContextFilter())
    root_logger.addHandler(handler)

    # Suppress noisy third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
