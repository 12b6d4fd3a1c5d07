"""JWT bearer authentication.

Tokens are HS256 JWTs signed with the shared jwt_secret. The subject claim
is the user id that owns posts and connected accounts.
"""

from dataclasses import dataclass
from typing import Annotated, Any

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from ...config import settings
from ...domain.errors import AuthorizationError

logger = structlog.get_logger()

security = HTTPBearer(auto_error=False)

# Required claims that must be present
REQUIRED_CLAIMS = ["sub", "exp"]


@dataclass
class AuthenticatedUser:
    """Represents an authenticated user from JWT claims."""

    sub: str  # User ID
    email: str | None = None
    name: str | None = None

    @property
    def user_id(self) -> str:
        return self.sub


def verify_token(token: str, secret: str, algorithm: str = "HS256") -> dict[str, Any]:
    """Verify a JWT and return its claims.

    Raises:
        HTTPException: 401 if the token is invalid, expired or missing claims
    """
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        logger.warning("JWT verification failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    missing = [claim for claim in REQUIRED_CLAIMS if not claims.get(claim)]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: missing {', '.join(missing)}",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> AuthenticatedUser | None:
    """Dependency to get the current authenticated user.

    Returns None if no bearer token is provided (for optional auth).
    """
    if not credentials or not credentials.credentials:
        return None

    if not settings.auth_enabled:
        # Return a mock user in development
        return AuthenticatedUser(
            sub="dev-user",
            email="dev@example.com",
            name="Development User",
        )

    if not settings.jwt_secret:
        raise RuntimeError("JWT secret not configured")

    claims = verify_token(credentials.credentials, settings.jwt_secret, settings.jwt_algorithm)
    return AuthenticatedUser(
        sub=claims["sub"],
        email=claims.get("email"),
        name=claims.get("name"),
    )


async def require_auth(
    user: Annotated[AuthenticatedUser | None, Depends(get_current_user)],
) -> AuthenticatedUser:
    """
    Dependency that requires authentication.

    Raises:
        AuthorizationError: No bearer token was sent (answered with 401)
    """
    if user is None:
        raise AuthorizationError("Not authenticated")
    return user
