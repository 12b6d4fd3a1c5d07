"""
Outbound port for platform publishing.

Each platform implements one adapter. Callers never branch on the
platform beyond picking the adapter out of the registry.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...domain.value_objects import Platform


@dataclass
class AdapterResult:
    """Identifier of the post created on the platform."""

    id: str


class PublishAdapter(ABC):
    """Publishes a normalized message to a single platform."""

    # Whether the platform rejects posts without an image.
    requires_image: bool = False

    @property
    @abstractmethod
    def platform(self) -> Platform:
        """Return the platform this adapter publishes to."""
        ...

    @abstractmethod
    async def publish(
        self,
        access_token: str,
        account_id: str,
        message: str,
        image_url: str | None = None,
    ) -> AdapterResult:
        """
        Run the platform's publish protocol.

        Args:
            access_token: Token valid for the account
            account_id: Page, business account or member id to publish as
            message: Final message text (hashtags already merged)
            image_url: Optional public image URL

        Returns:
            AdapterResult with the platform's post id

        Raises:
            PublishError: The platform call failed
            PreconditionError: The input cannot be published to this platform
        """
        ...
