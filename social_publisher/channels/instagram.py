import httpx
import structlog

from ..application.ports import AdapterResult, PublishAdapter
from ..domain.errors import PreconditionError, PublishError
from ..domain.value_objects import Platform
from .base import DEFAULT_GRAPH_URL, DEFAULT_TIMEOUT_SECONDS, publish_error

logger = structlog.get_logger()


class InstagramAdapter(PublishAdapter):
    """Instagram Graph API adapter for business account content publishing."""

    requires_image = True

    def __init__(
        self,
        graph_url: str = DEFAULT_GRAPH_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._graph_url = graph_url.rstrip("/")
        self._timeout = timeout

    @property
    def platform(self) -> Platform:
        return Platform.INSTAGRAM

    async def publish(
        self,
        access_token: str,
        account_id: str,
        message: str,
        image_url: str | None = None,
    ) -> AdapterResult:
        """Publish to Instagram: create a media container, then publish it.

        A container left behind by a failed second step is not cleaned up;
        Instagram expires unpublished containers.
        """
        if not image_url:
            raise PreconditionError("Instagram posts require an image")

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            # Step 1: Create media container
            try:
                response = await client.post(
                    f"{self._graph_url}/{account_id}/media",
                    data={
                        "image_url": image_url,
                        "caption": message,
                        "access_token": access_token,
                    },
                )
                response.raise_for_status()
                creation_id = response.json().get("id")
            except httpx.HTTPError as e:
                raise publish_error(self.platform, "container", e) from e

            if not creation_id:
                raise PublishError(self.platform.value, "Instagram container error: response has no id")

            # Step 2: Publish the container
            try:
                response = await client.post(
                    f"{self._graph_url}/{account_id}/media_publish",
                    data={
                        "creation_id": creation_id,
                        "access_token": access_token,
                    },
                )
                response.raise_for_status()
                media_id = response.json().get("id")
            except httpx.HTTPError as e:
                logger.warning("Instagram container left unpublished", creation_id=creation_id)
                raise publish_error(self.platform, "publish", e) from e

        if not media_id:
            raise PublishError(self.platform.value, "Instagram publish error: response has no id")

        logger.info("Instagram post published", post_id=media_id, creation_id=creation_id)
        return AdapterResult(id=str(media_id))
