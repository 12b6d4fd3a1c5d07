"""
Structured logging configuration.

Centralized logging setup with:
- Structured JSON output
- Correlation ID tracking for HTTP requests
- Sweep ID tracking for scheduled runs
- Redaction of OAuth secrets and tokens
- Timing helper
"""

import logging
import re
import sys
import time
from contextvars import ContextVar
from uuid import uuid4

import structlog

# Context variables for request and sweep correlation
correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
sweep_id: ContextVar[str] = ContextVar("sweep_id", default="")

# Keys whose values are credentials; never rendered
SECRET_KEYS = frozenset(
    {
        "access_token",
        "page_token",
        "client_secret",
        "code",
        "fb_exchange_token",
        "refresh_token",
        "authorization",
        "state",
    }
)
REDACTED = "[REDACTED]"

# access_token=... inside URLs and httpx error messages
_SECRET_PARAM = re.compile(
    r"(?<!\w)((?:access_token|client_secret|fb_exchange_token|code)=)[^&\s'\"]+"
)


def configure_logging(service_name: str, level: str = "INFO") -> None:
    """
    Configure structured logging for a service.

    Args:
        service_name: Name of the service for log context
        level: Standard logging level name
    """
    # structlog.stdlib.LoggerFactory wraps stdlib logging, so it needs handlers
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _add_service_name(service_name),
            _add_correlation_ids,
            structlog.processors.format_exc_info,
            redact_secrets,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def _add_service_name(service_name: str):
    """Processor to add service name to all logs."""

    def processor(logger, method_name, event_dict):
        event_dict["service"] = service_name
        return event_dict

    return processor


def _add_correlation_ids(logger, method_name, event_dict):
    """Processor to add correlation and sweep IDs if present."""
    cid = correlation_id.get()
    if cid:
        event_dict.setdefault("correlation_id", cid)
    sid = sweep_id.get()
    if sid:
        event_dict.setdefault("sweep_id", sid)
    return event_dict


def redact_secrets(logger, method_name, event_dict):
    """Processor that masks credentials in keys and in query strings of messages."""
    for key, value in event_dict.items():
        if key.lower() in SECRET_KEYS:
            event_dict[key] = REDACTED
        elif isinstance(value, str) and "=" in value:
            event_dict[key] = _SECRET_PARAM.sub(rf"\1{REDACTED}", value)
    return event_dict


def set_correlation_id(cid: str) -> None:
    """Set correlation ID for current context."""
    correlation_id.set(cid)


def new_sweep_id() -> str:
    """Generate and set a sweep ID for the current context."""
    sid = uuid4().hex[:12]
    sweep_id.set(sid)
    return sid


class Timer:
    """
    Context manager for timing operations.

    Usage:
        with Timer() as t:
            await dispatcher.sweep()
        logger.info("Sweep finished", duration_ms=t.duration_ms)
    """

    def __init__(self):
        self._start: float = 0
        self._end: float = 0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *args) -> None:
        self._end = time.perf_counter()

    @property
    def duration_ms(self) -> float:
        """Duration in milliseconds, rounded to 2 decimal places."""
        return round((self._end - self._start) * 1000, 2)
