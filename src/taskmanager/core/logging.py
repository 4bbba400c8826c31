"""JSON logging for the task management service.

Each record is rendered as one JSON object per line. The fields listed in
:data:`AUDIT_FIELDS` (who acted, on what, and with which outcome) are
top-level keys; anything else passed via ``extra=`` is nested under
``"extra"``.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

from .config import Settings
from .context import get_actor_id, get_request_id

# Structured keys emitted by the services, the policy and the request middleware.
AUDIT_FIELDS: tuple[str, ...] = (
    "actor_id",
    "action",
    "decision",
    "owner_id",
    "task_id",
    "user_id",
    "fields",
    "status_code",
    "duration_ms",
)

_STANDARD_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {
    "message",
    "asctime",
    "taskName",
    "request_id",
}


def _jsonable(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    try:
        json.dumps(value)
    except TypeError:
        return str(value)
    return value


class JsonLogFormatter(logging.Formatter):
    """Render a record as a JSON line with audit fields at the top level."""

    def __init__(self, *, defaults: dict[str, Any] | None = None) -> None:
        super().__init__()
        self._defaults = dict(defaults or {})

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            **self._defaults,
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }
        for field in AUDIT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = _jsonable(value)

        extra = {
            key: _jsonable(value)
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS and key not in AUDIT_FIELDS
        }
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class RequestContextFilter(logging.Filter):
    """Stamp records with the current request id and, when known, the acting user.

    An ``actor_id`` passed explicitly through ``extra=`` wins over the one
    bound to the request.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.request_id = get_request_id()
        if getattr(record, "actor_id", None) is None:
            record.actor_id = get_actor_id()
        return True


def _logger_levels(settings: Settings, level: int) -> dict[str, int]:
    return {
        "uvicorn": level,
        "uvicorn.error": level,
        "uvicorn.access": logging.WARNING,
        "sqlalchemy.engine": logging.INFO if settings.db_echo else logging.WARNING,
    }


def configure_logging(settings: Settings) -> None:
    """Route all service logging through one JSON handler on stdout."""

    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.captureWarnings(True)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": JsonLogFormatter,
                    "defaults": {
                        "service": settings.project_name,
                        "environment": settings.environment,
                    },
                }
            },
            "filters": {"request_context": {"()": RequestContextFilter}},
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "json",
                    "filters": ["request_context"],
                }
            },
            "root": {"handlers": ["stdout"], "level": level},
            "loggers": {
                name: {"handlers": ["stdout"], "level": logger_level, "propagate": False}
                for name, logger_level in _logger_levels(settings, level).items()
            },
        }
    )


__all__ = ["AUDIT_FIELDS", "JsonLogFormatter", "RequestContextFilter", "configure_logging"]
