"""OAuth callback: exchanges the code and stores the credential."""

from urllib.parse import urlencode

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from ....application.services import ConnectAccountService
from ....config import Settings
from ....domain.errors import OAuthError, UnsupportedPlatformError
from ....infrastructure.oauth import InvalidStateError, decode_state
from ..dependencies import get_connect_service, get_settings

router = APIRouter(prefix="/social", tags=["accounts"])
logger = structlog.get_logger()


def _redirect(config: Settings, **params: str) -> RedirectResponse:
    base = config.app_base_url.rstrip("/")
    return RedirectResponse(f"{base}/dashboard/accounts?{urlencode(params)}")


@router.get("/callback", summary="OAuth callback")
async def oauth_callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    config: Settings = Depends(get_settings),
    service: ConnectAccountService = Depends(get_connect_service),
) -> RedirectResponse:
    if error:
        return _redirect(config, error=error)
    if not code or not state:
        return _redirect(config, error="missing_params")

    try:
        user_id, platform = decode_state(state, config.secret_key)
    except InvalidStateError as e:
        logger.warning("Rejected OAuth state", error=str(e))
        return _redirect(config, error="invalid_state")

    try:
        await service.connect(user_id, platform, code, config.oauth_redirect_uri)
    except UnsupportedPlatformError:
        return _redirect(config, error="invalid_platform")
    except OAuthError as e:
        logger.error(
            "OAuth exchange failed",
            platform=e.platform,
            stage=e.stage.value,
            error=str(e),
        )
        return _redirect(config, error=e.code)
    except Exception as e:
        # The browser is mid-redirect; never leave it on an error page
        logger.error(
            "OAuth callback failed",
            platform=platform,
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        return _redirect(config, error="oauth_failed")

    return _redirect(config, success="true", platform=platform)
