"""
Meta (Facebook / Instagram) OAuth exchange.

Protocol:
1. code -> short-lived user token
2. short-lived -> long-lived user token (about 60 days)
3. list the user's pages and pick one; the page token is what gets stored
4. Instagram only: resolve the business account linked to the page
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import httpx
import structlog

from ...application.ports import OAuthExchange, OAuthGrant
from ...channels.base import DEFAULT_GRAPH_URL, DEFAULT_TIMEOUT_SECONDS, api_error_message
from ...domain.errors import OAuthError, OAuthStage
from ...domain.value_objects import Platform

logger = structlog.get_logger()

PageSelector = Callable[[list[dict]], dict]


@dataclass(frozen=True)
class MetaOAuthConfig:
    client_id: str
    client_secret: str
    graph_url: str = DEFAULT_GRAPH_URL


def first_page(pages: list[dict]) -> dict:
    """Default page selection: the first manageable page."""
    return pages[0]


class MetaOAuthExchange(OAuthExchange):
    """Code exchange for Facebook Pages and Instagram business accounts."""

    def __init__(
        self,
        config: MetaOAuthConfig,
        platform: Platform = Platform.FACEBOOK,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        page_selector: PageSelector = first_page,
    ) -> None:
        if platform not in (Platform.FACEBOOK, Platform.INSTAGRAM):
            raise ValueError(f"Meta OAuth does not serve {platform.value}")
        self._config = config
        self._platform = platform
        self._timeout = timeout
        self._select_page = page_selector
        self._graph_url = config.graph_url.rstrip("/")

    @property
    def platform(self) -> Platform:
        return self._platform

    async def exchange(self, code: str, redirect_uri: str) -> OAuthGrant:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            short_lived = await self._get_json(
                client,
                f"{self._graph_url}/oauth/access_token",
                {
                    "client_id": self._config.client_id,
                    "redirect_uri": redirect_uri,
                    "client_secret": self._config.client_secret,
                    "code": code,
                },
                OAuthStage.CODE_EXCHANGE,
            )
            short_token = self._require(short_lived, "access_token", OAuthStage.CODE_EXCHANGE)

            long_lived = await self._get_json(
                client,
                f"{self._graph_url}/oauth/access_token",
                {
                    "grant_type": "fb_exchange_token",
                    "client_id": self._config.client_id,
                    "client_secret": self._config.client_secret,
                    "fb_exchange_token": short_token,
                },
                OAuthStage.TOKEN_UPGRADE,
            )
            user_token = self._require(long_lived, "access_token", OAuthStage.TOKEN_UPGRADE)
            try:
                expires_at = _expiry(long_lived.get("expires_in"))
            except (TypeError, ValueError) as e:
                raise OAuthError(
                    self._platform.value,
                    OAuthStage.TOKEN_UPGRADE,
                    f"Meta returned an invalid expires_in: {long_lived.get('expires_in')!r}",
                ) from e

            accounts = await self._get_json(
                client,
                f"{self._graph_url}/me/accounts",
                {"access_token": user_token},
                OAuthStage.ACCOUNT_RESOLUTION,
            )
            pages = [p for p in accounts.get("data") or [] if isinstance(p, dict) and p.get("id")]
            if not pages:
                raise OAuthError(
                    self._platform.value,
                    OAuthStage.ACCOUNT_RESOLUTION,
                    "No Facebook pages found for this account",
                    code="no_pages",
                )

            try:
                page = self._select_page(pages)
                page_id = str(page.get("id") or "")
            except (LookupError, ValueError, AttributeError) as e:
                raise OAuthError(
                    self._platform.value,
                    OAuthStage.ACCOUNT_RESOLUTION,
                    f"Page selection failed: {e}",
                ) from e
            if not page_id:
                raise OAuthError(
                    self._platform.value,
                    OAuthStage.ACCOUNT_RESOLUTION,
                    "Selected page has no id",
                )
            page_token = page.get("access_token")
            if not page_token:
                raise OAuthError(
                    self._platform.value,
                    OAuthStage.ACCOUNT_RESOLUTION,
                    f"Page {page_id} returned no access token",
                )

            account_id = page_id
            if self._platform == Platform.INSTAGRAM:
                account_id = await self._instagram_account_id(client, page_id, page_token)

        logger.info(
            "Meta OAuth exchange completed",
            platform=self._platform.value,
            page_id=page_id,
            pages_available=len(pages),
        )
        return OAuthGrant(
            access_token=page_token,
            platform_account_id=account_id,
            display_name=page.get("name"),
            expires_at=expires_at,
        )

    async def _instagram_account_id(
        self, client: httpx.AsyncClient, page_id: str, page_token: str
    ) -> str:
        ig_account = None
        try:
            response = await client.get(
                f"{self._graph_url}/{page_id}",
                params={"fields": "instagram_business_account", "access_token": page_token},
            )
            response.raise_for_status()
            body = response.json()
            ig_account = body.get("instagram_business_account") if isinstance(body, dict) else None
        except ValueError as e:
            raise OAuthError(
                self._platform.value,
                OAuthStage.ACCOUNT_RESOLUTION,
                "Meta returned an invalid response",
            ) from e
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Instagram account lookup failed",
                page_id=page_id,
                error=api_error_message(e.response),
            )
        except httpx.HTTPError as e:
            raise OAuthError(
                self._platform.value, OAuthStage.ACCOUNT_RESOLUTION, f"Meta request failed: {e}"
            ) from e

        if not isinstance(ig_account, dict) or not ig_account.get("id"):
            raise OAuthError(
                self._platform.value,
                OAuthStage.ACCOUNT_RESOLUTION,
                f"No Instagram business account linked to page {page_id}",
                code="no_instagram",
            )
        return str(ig_account["id"])

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: dict,
        stage: OAuthStage,
    ) -> dict:
        try:
            response = await client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except ValueError as e:
            raise OAuthError(
                self._platform.value, stage, "Meta returned an invalid response"
            ) from e
        except httpx.HTTPStatusError as e:
            raise OAuthError(
                self._platform.value, stage, f"Meta OAuth error: {api_error_message(e.response)}"
            ) from e
        except httpx.HTTPError as e:
            raise OAuthError(self._platform.value, stage, f"Meta request failed: {e}") from e

        if not isinstance(data, dict):
            raise OAuthError(self._platform.value, stage, "Meta returned an invalid response")
        return data

    def _require(self, data: dict, key: str, stage: OAuthStage) -> str:
        value = data.get(key)
        if not value:
            raise OAuthError(self._platform.value, stage, f"Meta response missing {key}")
        return value


def _expiry(expires_in) -> datetime | None:
    if not expires_in:
        return None
    return datetime.now(UTC) + timedelta(seconds=int(expires_in))
