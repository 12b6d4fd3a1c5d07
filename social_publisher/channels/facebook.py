import httpx
import structlog

from ..application.ports import AdapterResult, PublishAdapter
from ..domain.errors import PublishError
from ..domain.value_objects import Platform
from .base import DEFAULT_GRAPH_URL, DEFAULT_TIMEOUT_SECONDS, publish_error

logger = structlog.get_logger()


class FacebookAdapter(PublishAdapter):
    """Facebook Graph API adapter for Page posts."""

    def __init__(
        self,
        graph_url: str = DEFAULT_GRAPH_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._graph_url = graph_url.rstrip("/")
        self._timeout = timeout

    @property
    def platform(self) -> Platform:
        return Platform.FACEBOOK

    async def publish(
        self,
        access_token: str,
        account_id: str,
        message: str,
        image_url: str | None = None,
    ) -> AdapterResult:
        """Post to a Facebook Page feed, or to its photos when an image is given."""
        if image_url:
            url = f"{self._graph_url}/{account_id}/photos"
            payload = {"url": image_url, "caption": message}
        else:
            url = f"{self._graph_url}/{account_id}/feed"
            payload = {"message": message}
        payload["access_token"] = access_token

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(url, data=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise publish_error(self.platform, "publish", e) from e

        post_id = data.get("post_id") or data.get("id")
        if not post_id:
            raise PublishError(self.platform.value, "Facebook publish error: response has no post id")

        logger.info("Facebook post created", post_id=post_id, photo=bool(image_url))
        return AdapterResult(id=str(post_id))
