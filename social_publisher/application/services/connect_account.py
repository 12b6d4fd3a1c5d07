"""
Account connection service.

Runs the platform's OAuth exchange and stores the resulting credential.
This is the only writer of credentials.
"""

from collections.abc import Mapping
from datetime import UTC, datetime

import structlog

from ...domain.entities import SocialCredential
from ...domain.errors import UnsupportedPlatformError
from ...domain.value_objects import Platform
from ..ports import CredentialRepository, OAuthExchange

logger = structlog.get_logger()


class ConnectAccountService:
    """Connects, lists and disconnects social accounts for a user."""

    def __init__(
        self,
        credentials: CredentialRepository,
        exchanges: Mapping[Platform, OAuthExchange],
    ) -> None:
        self._credentials = credentials
        self._exchanges = exchanges

    async def connect(
        self,
        user_id: str,
        platform: Platform | str,
        code: str,
        redirect_uri: str,
    ) -> SocialCredential:
        """
        Exchange an authorization code and upsert the credential.

        Raises:
            UnsupportedPlatformError: No exchange is registered for the platform
            OAuthError: The exchange failed; nothing is stored
        """
        try:
            target = Platform.parse(platform)
        except ValueError:
            raise UnsupportedPlatformError(str(platform)) from None

        exchange = self._exchanges.get(target)
        if exchange is None:
            raise UnsupportedPlatformError(target.value)

        grant = await exchange.exchange(code, redirect_uri)

        credential = SocialCredential(
            user_id=user_id,
            platform=target,
            platform_account_id=grant.platform_account_id,
            access_token=grant.access_token,
            expires_at=grant.expires_at,
            display_name=grant.display_name,
            updated_at=datetime.now(UTC),
        )
        await self._credentials.upsert(credential)

        logger.info(
            "Social account connected",
            user_id=user_id,
            platform=target.value,
            account_id=grant.platform_account_id,
            expires_at=grant.expires_at.isoformat() if grant.expires_at else None,
        )
        return credential

    async def list_accounts(self, user_id: str) -> list[SocialCredential]:
        return await self._credentials.list_for_user(user_id)

    async def disconnect(self, user_id: str, platform: Platform | str) -> bool:
        """Delete the user's credential for a platform."""
        try:
            target = Platform.parse(platform)
        except ValueError:
            raise UnsupportedPlatformError(str(platform)) from None

        deleted = await self._credentials.delete(user_id, target)
        if deleted:
            logger.info("Social account disconnected", user_id=user_id, platform=target.value)
        return deleted
