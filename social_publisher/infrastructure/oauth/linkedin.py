"""LinkedIn OAuth exchange: code -> token, then userinfo for the member id."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import httpx
import structlog

from ...application.ports import OAuthExchange, OAuthGrant
from ...channels.base import DEFAULT_TIMEOUT_SECONDS, api_error_message
from ...channels.linkedin import LINKEDIN_API_URL
from ...domain.errors import OAuthError, OAuthStage
from ...domain.value_objects import Platform

logger = structlog.get_logger()

LINKEDIN_AUTH_URL = "https://www.linkedin.com/oauth/v2"


@dataclass(frozen=True)
class LinkedInOAuthConfig:
    client_id: str
    client_secret: str
    auth_url: str = LINKEDIN_AUTH_URL
    api_url: str = LINKEDIN_API_URL


class LinkedInOAuthExchange(OAuthExchange):
    def __init__(
        self,
        config: LinkedInOAuthConfig,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._config = config
        self._timeout = timeout

    @property
    def platform(self) -> Platform:
        return Platform.LINKEDIN

    async def exchange(self, code: str, redirect_uri: str) -> OAuthGrant:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.post(
                    f"{self._config.auth_url.rstrip('/')}/accessToken",
                    data={
                        "grant_type": "authorization_code",
                        "code": code,
                        "client_id": self._config.client_id,
                        "client_secret": self._config.client_secret,
                        "redirect_uri": redirect_uri,
                    },
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
                response.raise_for_status()
                token = response.json()
            except ValueError as e:
                raise self._error(
                    OAuthStage.CODE_EXCHANGE, "LinkedIn returned an invalid token response"
                ) from e
            except httpx.HTTPStatusError as e:
                raise self._error(
                    OAuthStage.CODE_EXCHANGE,
                    f"LinkedIn OAuth error: {api_error_message(e.response)}",
                ) from e
            except httpx.HTTPError as e:
                raise self._error(OAuthStage.CODE_EXCHANGE, f"LinkedIn request failed: {e}") from e

            access_token = token.get("access_token") if isinstance(token, dict) else None
            if not access_token:
                raise self._error(OAuthStage.CODE_EXCHANGE, "LinkedIn response missing access_token")

            try:
                response = await client.get(
                    f"{self._config.api_url.rstrip('/')}/userinfo",
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                response.raise_for_status()
                profile = response.json()
            except ValueError as e:
                raise self._error(
                    OAuthStage.ACCOUNT_RESOLUTION, "LinkedIn returned an invalid profile response"
                ) from e
            except httpx.HTTPStatusError as e:
                raise self._error(
                    OAuthStage.ACCOUNT_RESOLUTION,
                    f"Failed to fetch profile: {api_error_message(e.response)}",
                ) from e
            except httpx.HTTPError as e:
                raise self._error(OAuthStage.ACCOUNT_RESOLUTION, f"LinkedIn request failed: {e}") from e

        subject = profile.get("sub") if isinstance(profile, dict) else None
        if not subject:
            raise self._error(OAuthStage.ACCOUNT_RESOLUTION, "LinkedIn profile has no subject id")

        expires_in = token.get("expires_in")
        try:
            expires_at = datetime.now(UTC) + timedelta(seconds=int(expires_in)) if expires_in else None
        except (TypeError, ValueError) as e:
            raise self._error(
                OAuthStage.CODE_EXCHANGE, f"LinkedIn returned an invalid expires_in: {expires_in!r}"
            ) from e

        logger.info("LinkedIn OAuth exchange completed", account_id=subject)
        return OAuthGrant(
            access_token=access_token,
            platform_account_id=str(subject),
            display_name=profile.get("name"),
            expires_at=expires_at,
        )

    def _error(self, stage: OAuthStage, message: str) -> OAuthError:
        return OAuthError(Platform.LINKEDIN.value, stage, message)
