"""
Outbound port for connected social account credentials.

Only the account connection path writes credentials; the dispatcher
reads them through get_credential.
"""

from abc import ABC, abstractmethod

from ...domain.entities import SocialCredential
from ...domain.value_objects import Platform


class CredentialRepository(ABC):
    """Outbound port for credential persistence."""

    @abstractmethod
    async def get_credential(
        self, user_id: str, platform: Platform
    ) -> SocialCredential | None:
        """
        Retrieve the credential for a user and platform.

        Args:
            user_id: Owner of the credential
            platform: Platform the account belongs to

        Returns:
            SocialCredential if connected, None otherwise
        """
        ...

    @abstractmethod
    async def upsert(self, credential: SocialCredential) -> None:
        """
        Insert or replace the credential keyed by (user_id, platform).

        Args:
            credential: Credential produced by an OAuth exchange
        """
        ...

    @abstractmethod
    async def delete(self, user_id: str, platform: Platform) -> bool:
        """
        Remove a connected account.

        Returns:
            True if a credential was deleted
        """
        ...

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[SocialCredential]:
        """List all credentials connected by a user."""
        ...
