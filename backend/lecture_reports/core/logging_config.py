"""
Lecture Reports - Logging
=========================

One ``lecture_reports`` logger for the whole service. Development writes
short human-readable lines; production writes one JSON object per line so
log shippers can index request ids, users and report events.

Usage:
    from lecture_reports.core.logging_config import logger

    logger.info("[Courses] Created course DIWA2110")
    logger.log_report_event("reviewed", report.id, reviewer_id=user.id)
"""

import json
import logging
import sys
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from lecture_reports.core.config import settings

LOGGER_NAME = "lecture_reports"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024

# Per-request tracing, filled in by RequestLoggingMiddleware and the auth dependency
request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str] = ContextVar("user_id", default="")


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def set_user_id(user_id: str) -> None:
    user_id_var.set(user_id)


def generate_request_id() -> str:
    """Short random id, enough to correlate the lines of one request"""
    return uuid.uuid4().hex[:8]


# Attributes every LogRecord has; anything else came in through `extra=`
_STANDARD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "taskName"}


class JSONFormatter(logging.Formatter):
    """One JSON document per record, extras flattened into the top level"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "source": f"{record.module}.{record.funcName}:{record.lineno}",
            "request_id": request_id_var.get() or None,
            "user_id": user_id_var.get() or None,
        }

        if record.exc_info and record.exc_info[0]:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": "".join(traceback.format_exception(*record.exc_info)),
            }

        entry.update(
            (key, value) for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        )
        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Plain-text formatter exposing %(request_id)s and %(user_id)s"""

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = request_id_var.get() or "-"
        record.user_id = user_id_var.get() or "-"
        return super().format(record)


class ReportsLogger(logging.Logger):
    """Logger with helpers for the events the service cares about"""

    def _event(self, level: int, event_type: str, message: str, **fields) -> None:
        self.log(level, message, extra={"event_type": event_type, **fields})

    def log_request(self, method: str, path: str, status_code: int,
                    duration_ms: float, **kwargs) -> None:
        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        self._event(
            level, "http_request",
            f"{method} {path} -> {status_code} ({duration_ms:.2f}ms)",
            http_method=method, http_path=path, http_status=status_code,
            duration_ms=duration_ms, **kwargs
        )

    def log_auth_event(self, event: str, success: bool, user_email: Optional[str] = None,
                       reason: Optional[str] = None, **kwargs) -> None:
        """Register / login / refresh outcomes; failures log at WARNING"""
        message = f"Auth {event} {'ok' if success else 'failed'}"
        if user_email:
            message += f" for {user_email}"
        if reason:
            message += f": {reason}"
        self._event(
            logging.INFO if success else logging.WARNING, "auth", message,
            auth_event=event, auth_success=success, user_email=user_email,
            failure_reason=reason, **kwargs
        )

    def log_report_event(self, event: str, report_id: Any, **kwargs) -> None:
        """created, updated, reviewed, feedback_updated, deleted"""
        self._event(
            logging.INFO, "report", f"Report {report_id}: {event}",
            report_event=event, report_id=report_id, **kwargs
        )

    def log_error_with_context(self, error: Exception, context: Optional[str] = None, **kwargs) -> None:
        self.error(
            f"Error in {context}: {type(error).__name__}: {error}",
            exc_info=error,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_context": context,
                **kwargs
            }
        )

    def log_db_query(self, operation: str, table: str, duration_ms: float,
                     success: bool = True, **kwargs) -> None:
        self._event(
            logging.DEBUG if success else logging.ERROR, "db_query",
            f"DB {operation} on {table} ({duration_ms:.2f}ms)",
            db_operation=operation, db_table=table, duration_ms=duration_ms,
            db_success=success, **kwargs
        )


def _file_handler(formatter: logging.Formatter, backups: int) -> Optional[logging.Handler]:
    if not settings.LOG_FILE:
        return None
    path = Path(settings.LOG_FILE)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=backups)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> ReportsLogger:
    """Configure the service logger for the current ENVIRONMENT"""
    logging.setLoggerClass(ReportsLogger)
    logger = logging.getLogger(LOGGER_NAME)
    logger.__class__ = ReportsLogger
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.handlers.clear()
    logger.propagate = False

    json_logging = settings.ENVIRONMENT == "production"
    if json_logging:
        console_formatter = file_formatter = JSONFormatter()
        backups = 10
    else:
        console_formatter = ContextualFormatter("%(levelname)-8s | %(message)s")
        file_formatter = ContextualFormatter(
            "%(asctime)s | %(levelname)-8s | [%(request_id)s] [%(user_id)s] | "
            "%(module)s:%(lineno)d | %(message)s"
        )
        backups = 5

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(console_formatter)
    logger.addHandler(console)

    file_handler = _file_handler(file_formatter, backups)
    if file_handler:
        logger.addHandler(file_handler)

    for noisy in ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.debug(
        "Logging initialized",
        extra={"environment": settings.ENVIRONMENT, "json_logging": json_logging}
    )
    return logger


logger: ReportsLogger = setup_logging()


__all__ = [
    "logger",
    "setup_logging",
    "set_request_id",
    "set_user_id",
    "generate_request_id",
    "JSONFormatter",
    "ReportsLogger",
]
