import httpx

from ..domain.errors import PublishError
from ..domain.value_objects import Platform

DEFAULT_GRAPH_URL = "https://graph.facebook.com/v21.0"
DEFAULT_TIMEOUT_SECONDS = 30.0


def api_error_message(response: httpx.Response) -> str:
    """Extract a readable error from a platform error response."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return f"{response.status_code}: {error['message']}"
        if isinstance(error, str):
            return f"{response.status_code}: {error}"
        if body.get("message"):
            return f"{response.status_code}: {body['message']}"

    return f"HTTP {response.status_code}"


def publish_error(platform: Platform, step: str, exc: Exception) -> PublishError:
    """Convert an httpx failure into a PublishError for the platform."""
    if isinstance(exc, httpx.HTTPStatusError):
        detail = api_error_message(exc.response)
    elif isinstance(exc, httpx.TimeoutException):
        detail = "request timed out"
    else:
        detail = str(exc) or type(exc).__name__
    return PublishError(platform.value, f"{platform.display_name} {step} error: {detail}")
