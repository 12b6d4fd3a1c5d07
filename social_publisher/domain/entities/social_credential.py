from dataclasses import dataclass, field
from datetime import UTC, datetime

from ..value_objects import Platform


@dataclass
class SocialCredential:
    """Access token and account id connected for one (user, platform) pair."""

    user_id: str
    platform: Platform
    platform_account_id: str
    access_token: str
    expires_at: datetime | None = None
    display_name: str | None = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def key(self) -> tuple[str, Platform]:
        return (self.user_id, self.platform)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True if the token has an expiry strictly before ``now``."""
        if self.expires_at is None:
            return False
        now = now or datetime.now(UTC)
        return self.expires_at < now
