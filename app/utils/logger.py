"""
Structured logging for the revenue backend.

Everything logs under the ``app`` namespace. Console output is plain text;
the optional log file gets one JSON object per line so audit and timing
records can be grepped by field.
"""
import json
import logging
import logging.config
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

ROOT_LOGGER = "app"
AUDIT_LOGGER = "app.audit.revenue"
TIMING_LOGGER = "app.timing"

# LogRecord attribute carrying keyword fields
FIELDS_ATTR = "fields"


class JSONFormatter(logging.Formatter):
    """One JSON line per record: level, logger, message, then the fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "at": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update(getattr(record, FIELDS_ATTR, None) or {})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        # fields may hold Decimals, datetimes and enums
        return json.dumps(entry, ensure_ascii=False, default=str)


class StructuredLogger:
    """``logger.info("Shops loaded", count=3)``: keyword arguments become JSON fields.

    ``None`` fields are dropped; ``exc_info`` goes to the stdlib logger.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _emit(self, level: int, message: str, exc_info: bool = False, **fields: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        fields = {k: v for k, v in fields.items() if v is not None}
        self.logger.log(level, message, exc_info=exc_info, extra={FIELDS_ATTR: fields})

    def debug(self, message: str, **fields: Any) -> None:
        self._emit(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self._emit(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit(logging.WARNING, message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self._emit(logging.ERROR, message, **fields)


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None, enable_console: bool = True) -> None:
    """Configure the ``app`` logger tree via dictConfig."""
    handlers: dict[str, dict[str, Any]] = {}
    if enable_console:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "stream": sys.stdout,
            "formatter": "plain",
        }
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": log_file,
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
            "formatter": "json",
        }

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": JSONFormatter},
            "plain": {"format": "%(asctime)s %(levelname)-7s %(name)s: %(message)s"},
        },
        "handlers": handlers,
        "loggers": {
            ROOT_LOGGER: {"level": log_level.upper(), "handlers": list(handlers), "propagate": False},
        },
    })


def get_logger(name: str) -> StructuredLogger:
    """Logger for a module; names outside ``app`` are nested under it."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return StructuredLogger(name)


def log_revenue_event(
    event_type: str,
    *,
    user_id: Optional[int] = None,
    request_id: Optional[str] = None,
    **details: Any,
) -> None:
    """Audit record for an admin action on revenue data (report viewed, day recalculated)."""
    get_logger(AUDIT_LOGGER).info(
        f"Revenue event: {event_type}",
        event_type=event_type,
        user_id=user_id,
        request_id=request_id,
        **details,
    )


def log_timing(operation: str, started: float, **fields: Any) -> float:
    """Log the elapsed time since ``started`` (a ``time.time()`` value). Returns milliseconds."""
    duration_ms = round((time.time() - started) * 1000, 2)
    get_logger(TIMING_LOGGER).info(f"Timing: {operation}", operation=operation, duration_ms=duration_ms, **fields)
    return duration_ms
