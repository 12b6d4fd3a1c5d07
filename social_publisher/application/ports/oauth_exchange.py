"""
Outbound port for OAuth code exchange.

Turns an authorization code into an access token plus the concrete
account id to publish as.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ...domain.value_objects import Platform


@dataclass
class OAuthGrant:
    """Result of a successful exchange."""

    access_token: str
    platform_account_id: str
    display_name: str | None = None
    expires_at: datetime | None = None


class OAuthExchange(ABC):
    """One implementation per platform."""

    @property
    @abstractmethod
    def platform(self) -> Platform:
        ...

    @abstractmethod
    async def exchange(self, code: str, redirect_uri: str) -> OAuthGrant:
        """
        Exchange a single-use authorization code.

        Raises:
            OAuthError: With the stage that failed; never retried
        """
        ...
