"""
ClubHQ Logging Configuration
Structured logs for requests, store access, moderation and live channels.

Context keys that can carry a member's contact details or credentials are
masked before a record is written.
"""
import json
import logging
import os
import sys
import time
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Dict, Optional

LOG_LEVEL = os.environ.get("CLUBHQ_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.environ.get("CLUBHQ_LOG_FORMAT", "json")  # json or text

# Registration and member payloads hold these; tokens come from the live channels
REDACTED_KEYS = frozenset({"email", "phone", "password", "token", "access_token", "refresh_token"})
REDACTED = "***"


def redact(context: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``context`` with private values masked, one level of nesting deep."""
    clean = {}
    for key, value in context.items():
        if key in REDACTED_KEYS and value is not None:
            clean[key] = REDACTED
        elif isinstance(value, dict):
            clean[key] = {k: REDACTED if k in REDACTED_KEYS else v for k, v in value.items()}
        else:
            clean[key] = value
    return clean


class ClubFormatter(logging.Formatter):
    """Renders a record as one JSON object, or as a short text line for local runs."""

    def __init__(self, fmt: str = "json"):
        super().__init__()
        self.fmt = fmt

    def format(self, record: logging.LogRecord) -> str:
        context = getattr(record, "context", {}) or {}
        if self.fmt == "text":
            line = f"{record.levelname:<7} {record.name} {record.getMessage()}"
            pairs = " ".join(f"{k}={v}" for k, v in context.items())
            line = f"{line} [{pairs}]" if pairs else line
            if record.exc_info:
                line = f"{line}\n{self.formatException(record.exc_info)}"
            return line

        data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **context,
        }
        if record.exc_info:
            data["traceback"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


class StructuredLogger:
    """Keyword-context logger; ``bind`` returns a child that repeats fixed context."""

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        self.name = name
        self.context = context or {}
        self.logger = logging.getLogger(name)
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(ClubFormatter(LOG_FORMAT))
            self.logger.addHandler(handler)
            self.logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
            self.logger.propagate = False

    def bind(self, **context) -> "StructuredLogger":
        return StructuredLogger(self.name, {**self.context, **context})

    def _log(self, level: int, message: str, exc_info=None, **context):
        if not self.logger.isEnabledFor(level):
            return
        self.logger.log(
            level,
            message,
            exc_info=exc_info,
            extra={"context": redact({**self.context, **context})},
        )

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, **context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, **context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, **context)

    def error(self, message: str, error: Optional[Exception] = None, **context):
        if error is not None:
            context["error_type"] = type(error).__name__
            context["error_message"] = str(error)
            exc_info = (type(error), error, error.__traceback__)
        else:
            exc_info = None
        self._log(logging.ERROR, message, exc_info=exc_info, **context)


def timed(logger: StructuredLogger):
    """Log how long a store call took; failures are logged and re-raised."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.warning(
                    "Store call failed",
                    operation=func.__name__,
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                    error_type=type(e).__name__,
                )
                raise
            logger.debug(
                "Store call completed",
                operation=func.__name__,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            return result
        return wrapper
    return decorator


api_logger = StructuredLogger("clubhq.api")
store_logger = StructuredLogger("clubhq.store")
events_logger = StructuredLogger("clubhq.events")
moderation_logger = StructuredLogger("clubhq.moderation")


def get_logger(name: str) -> StructuredLogger:
    """Logger under the clubhq namespace, e.g. ``get_logger("seed")``."""
    return StructuredLogger(f"clubhq.{name}")
