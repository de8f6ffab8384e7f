"""
Logging configuration.

Two output modes, selected by ``LOG_JSON``:
- plain text for local development
- one JSON object per line for log aggregation

Every record carries the current request id (and user id once the request is
authenticated) through context variables set by the request hooks in
``console_api.main``.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str] = ContextVar("user_id", default="")


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        record.user_id = user_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", "")
        if request_id:
            log_data["request_id"] = request_id

        user_id = getattr(record, "user_id", "")
        if user_id:
            log_data["user_id"] = user_id

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            log_data["data"] = extra_data

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)-7s [%(request_id)s] %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            message = f"{message} {json.dumps(extra_data, default=str)}"
        return message


def configure_logging(*, level: str = "INFO", json_output: bool = False) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JSONFormatter() if json_output else TextFormatter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_console_api", False):
            root.removeHandler(existing)

    handler._console_api = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level.upper())

    # SQL echo is controlled by DEBUG, not by the root level.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
