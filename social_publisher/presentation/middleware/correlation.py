"""
Correlation ID middleware for request tracing.

The ID is taken from X-Request-ID (or X-Correlation-ID) when present and
well formed, generated otherwise, bound to every log line of the request
and returned in the response headers.
"""

import re
from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ...infrastructure.logging import set_correlation_id

logger = structlog.get_logger()

# The ID ends up in log lines and SQL comments
_VALID_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def resolve_correlation_id(request: Request) -> str:
    """Client-supplied request ID, or a fresh UUID when absent or malformed."""
    for header in ("X-Request-ID", "X-Correlation-ID"):
        value = request.headers.get(header)
        if value is None:
            continue
        if _VALID_ID.fullmatch(value):
            return value
        logger.warning("Ignoring malformed request ID", header=header, length=len(value))
        break
    return str(uuid4())


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = resolve_correlation_id(request)

        set_correlation_id(correlation_id)

        with structlog.contextvars.bound_contextvars(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
        ):
            logger.info("Request started")

            response = await call_next(request)

            logger.info("Request completed", status_code=response.status_code)

        response.headers["X-Request-ID"] = correlation_id
        return response
