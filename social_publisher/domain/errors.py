"""
Error taxonomy for the publishing subsystem.

Every error raised on the publish and OAuth paths derives from
SocialPublisherError so callers can tell domain failures apart from bugs.
"""

from enum import Enum


class SocialPublisherError(Exception):
    """Base class for all publishing errors."""

    @property
    def message(self) -> str:
        return str(self)


class AuthorizationError(SocialPublisherError):
    """Caller is not authenticated or does not own the resource."""


class OAuthStage(str, Enum):
    CODE_EXCHANGE = "code-exchange"
    TOKEN_UPGRADE = "token-upgrade"
    ACCOUNT_RESOLUTION = "account-resolution"


class OAuthError(SocialPublisherError):
    """Failure while turning an authorization code into a credential.

    Terminal: OAuth codes are single-use, so the user has to restart
    authorization.
    """

    def __init__(
        self,
        platform: str,
        stage: OAuthStage,
        message: str,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.platform = platform
        self.stage = stage
        self.code = code or "oauth_failed"


class CredentialMissingError(SocialPublisherError):
    """No credential is connected for the (user, platform) pair."""

    def __init__(self, platform: str, user_id: str | None = None) -> None:
        super().__init__(f"No {platform} account connected")
        self.platform = platform
        self.user_id = user_id


class CredentialExpiredError(SocialPublisherError):
    """The stored access token is past its expiry."""

    def __init__(self, platform: str) -> None:
        super().__init__("Access token expired. Please reconnect your account.")
        self.platform = platform


class PublishError(SocialPublisherError):
    """A platform rejected or failed a publish call."""

    def __init__(self, platform: str, reason: str) -> None:
        super().__init__(reason)
        self.platform = platform
        self.reason = reason


class PreconditionError(SocialPublisherError):
    """Input is invalid for the target platform; no network call was made."""


class UnsupportedPlatformError(PreconditionError):
    def __init__(self, platform: str) -> None:
        super().__init__(f"Unsupported platform: {platform}")
        self.platform = platform


class PostNotFoundError(SocialPublisherError):
    def __init__(self, post_id: str) -> None:
        super().__init__(f"Content {post_id} not found")
        self.post_id = post_id


class PostStateError(SocialPublisherError):
    """The post's current status does not allow the requested transition."""

    def __init__(self, post_id: str, status: str, action: str) -> None:
        super().__init__(f"Cannot {action} content {post_id} in {status} status")
        self.post_id = post_id
        self.status = status
