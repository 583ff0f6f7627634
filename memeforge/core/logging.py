"""Structured logging for the MemeForge backend.

``get_logger(name)`` returns a ``ContextLogger``. Calls accept ``data={...}``
for structured fields, and the adapter stamps the current request id and
path onto the record when the call is made, so both formatters only read
record attributes.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any, Dict, Optional

from memeforge.core.time import utc_isoformat, utcnow

# Set per request by RequestContextMiddleware
request_context: ContextVar[Dict[str, Any]] = ContextVar("request_context", default={})

RECORD_FIELDS = ("request_id", "request_path", "data")


def current_request_id() -> str | None:
    """Return the request id bound to the running request, if any."""
    return request_context.get().get("request_id")


def record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Structured fields a ContextLogger attached to ``record``, empty ones dropped."""
    fields = {}
    for name in RECORD_FIELDS:
        value = getattr(record, name, None)
        if value:
            fields[name] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": utc_isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **record_fields(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Coloured single-line output for local development."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        fields = record_fields(record)
        color = self.LEVEL_COLORS.get(record.levelname, "")
        request_id = str(fields.get("request_id", "-"))[:8]

        parts = [
            utcnow().strftime("%Y-%m-%d %H:%M:%S"),
            f"{color}{record.levelname:8}{self.RESET}",
            request_id,
            record.name,
            record.getMessage(),
        ]
        if "data" in fields:
            parts.append(str(fields["data"]))

        line = " | ".join(parts)
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


class ContextLogger(logging.LoggerAdapter):
    """Adapter that turns ``data=`` and the request context into record fields."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = dict(kwargs.get("extra") or {})
        data = kwargs.pop("data", None)
        if data:
            extra["data"] = data

        ctx = request_context.get()
        if ctx:
            extra.setdefault("request_id", ctx.get("request_id"))
            extra.setdefault("request_path", ctx.get("path"))

        kwargs["extra"] = extra
        return msg, kwargs


_loggers: Dict[str, ContextLogger] = {}


def get_logger(name: str) -> ContextLogger:
    if name not in _loggers:
        _loggers[name] = ContextLogger(logging.getLogger(name), {})
    return _loggers[name]


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """Install the console handler, plus a JSON file handler when ``log_file`` is set."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter() if json_output else ConsoleFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)

    # Per-request lines come from RequestContextMiddleware
    for noisy in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
