"""
Publish router.

Selects the adapter for a platform, builds the outgoing message and
normalizes results and errors. Adding a platform means registering an
adapter; nothing here changes.
"""

from collections.abc import Mapping
from dataclasses import dataclass

import structlog

from ...domain.errors import (
    PreconditionError,
    PublishError,
    UnsupportedPlatformError,
)
from ...domain.value_objects import Platform, PostContent
from ...infrastructure.logging import Timer
from ..ports import PublishAdapter

logger = structlog.get_logger()


@dataclass
class PublishResult:
    """Normalized outcome of a successful publish."""

    id: str
    platform: Platform

    def to_dict(self) -> dict:
        return {"id": self.id, "platform": self.platform.value}


class PublishRouter:
    """Routes normalized content to the adapter registered for a platform."""

    def __init__(self, adapters: Mapping[Platform, PublishAdapter]) -> None:
        self._adapters = adapters

    def adapter_for(self, platform: Platform | str) -> PublishAdapter:
        try:
            key = Platform.parse(platform)
        except ValueError:
            raise UnsupportedPlatformError(str(platform)) from None
        adapter = self._adapters.get(key)
        if adapter is None:
            raise UnsupportedPlatformError(key.value)
        return adapter

    async def publish(
        self,
        platform: Platform | str,
        access_token: str,
        account_id: str,
        content: PostContent,
    ) -> PublishResult:
        """
        Publish content through the platform's adapter.

        Raises:
            UnsupportedPlatformError: No adapter is registered
            PreconditionError: The platform needs an image and none was given
            PublishError: The adapter failed; reason is prefixed with the platform
        """
        adapter = self.adapter_for(platform)
        name = adapter.platform.value

        if adapter.requires_image and not content.has_image:
            raise PreconditionError(
                f"{adapter.platform.display_name} posts require an image"
            )

        try:
            with Timer() as t:
                result = await adapter.publish(
                    access_token=access_token,
                    account_id=account_id,
                    message=content.message,
                    image_url=content.image_url,
                )
        except PreconditionError:
            raise
        except Exception as e:
            reason = e.reason if isinstance(e, PublishError) else str(e)
            logger.error("Publish failed", platform=name, error=reason)
            raise PublishError(name, f"Failed to publish to {name}: {reason}") from e

        logger.info(
            "Published to platform",
            platform=name,
            external_id=result.id,
            duration_ms=t.duration_ms,
        )
        return PublishResult(id=result.id, platform=adapter.platform)
