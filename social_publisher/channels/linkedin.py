import httpx
import structlog

from ..application.ports import AdapterResult, PublishAdapter
from ..domain.errors import PublishError
from ..domain.value_objects import Platform
from .base import DEFAULT_TIMEOUT_SECONDS, publish_error

logger = structlog.get_logger()

LINKEDIN_API_URL = "https://api.linkedin.com/v2"


def author_urn(account_id: str) -> str:
    """Member ids from the userinfo endpoint become person URNs."""
    if account_id.startswith("urn:li:"):
        return account_id
    return f"urn:li:person:{account_id}"


def build_share(author: str, text: str, image_url: str | None = None) -> dict:
    """Build a UGC share payload."""
    share_content: dict = {
        "shareCommentary": {"text": text},
        "shareMediaCategory": "IMAGE" if image_url else "NONE",
    }
    if image_url:
        share_content["media"] = [
            {
                "status": "READY",
                "originalUrl": image_url,
            }
        ]

    return {
        "author": author,
        "lifecycleState": "PUBLISHED",
        "specificContent": {"com.linkedin.ugc.ShareContent": share_content},
        "visibility": {"com.linkedin.ugc.MemberNetworkVisibility": "PUBLIC"},
    }


class LinkedInAdapter(PublishAdapter):
    """LinkedIn UGC API adapter for member posts."""

    def __init__(
        self,
        api_url: str = LINKEDIN_API_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout

    @property
    def platform(self) -> Platform:
        return Platform.LINKEDIN

    async def publish(
        self,
        access_token: str,
        account_id: str,
        message: str,
        image_url: str | None = None,
    ) -> AdapterResult:
        """Share a post as the connected member."""
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
            "X-Restli-Protocol-Version": "2.0.0",
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    f"{self._api_url}/ugcPosts",
                    headers=headers,
                    json=build_share(author_urn(account_id), message, image_url),
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise publish_error(self.platform, "publish", e) from e

        post_id = data.get("id")
        if not post_id:
            raise PublishError(self.platform.value, "LinkedIn publish error: response has no id")

        logger.info("LinkedIn post created", post_id=post_id)
        return AdapterResult(id=str(post_id))
