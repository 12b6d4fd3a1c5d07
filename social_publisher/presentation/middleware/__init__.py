from .auth import AuthenticatedUser, get_current_user, require_auth, verify_token
from .correlation import CorrelationIdMiddleware

__all__ = [
    "AuthenticatedUser",
    "CorrelationIdMiddleware",
    "get_current_user",
    "require_auth",
    "verify_token",
]
