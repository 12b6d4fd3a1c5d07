"""Maps publishing errors to HTTP responses with an {"error": ...} body."""

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ...domain.errors import (
    AuthorizationError,
    CredentialExpiredError,
    CredentialMissingError,
    OAuthError,
    PostNotFoundError,
    PostStateError,
    PreconditionError,
    PublishError,
    SocialPublisherError,
)

logger = structlog.get_logger()

# Checked in order; the first matching class wins.
ERROR_STATUS: list[tuple[type[SocialPublisherError], int]] = [
    (AuthorizationError, status.HTTP_401_UNAUTHORIZED),
    (CredentialExpiredError, status.HTTP_401_UNAUTHORIZED),
    (CredentialMissingError, status.HTTP_400_BAD_REQUEST),
    (PreconditionError, status.HTTP_400_BAD_REQUEST),
    (OAuthError, status.HTTP_400_BAD_REQUEST),
    (PostNotFoundError, status.HTTP_404_NOT_FOUND),
    (PostStateError, status.HTTP_409_CONFLICT),
    (PublishError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_for(exc: SocialPublisherError) -> int:
    for error_type, code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def _publisher_error_handler(request: Request, exc: SocialPublisherError) -> JSONResponse:
    code = status_for(exc)
    logger.warning(
        "Request failed",
        error_type=type(exc).__name__,
        error=str(exc),
        status_code=code,
    )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthorizationError) else None
    return JSONResponse(status_code=code, content={"error": str(exc)}, headers=headers)


async def _http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=exc.headers,
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(part) for part in err["loc"][1:]) for err in exc.errors()]
    message = f"Invalid or missing fields: {', '.join(f for f in fields if f)}" if fields else "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SocialPublisherError, _publisher_error_handler)
    app.add_exception_handler(HTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
