"""Batch sweep trigger, called by an external scheduler every 30 minutes."""

import hmac

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from ....application.dtos import SweepResponseDTO
from ....application.services import ScheduledDispatcher
from ....config import Settings
from ....infrastructure.logging import new_sweep_id
from ..dependencies import get_dispatcher, get_settings

router = APIRouter(prefix="/social", tags=["publishing"])
logger = structlog.get_logger()


def is_authorized(request: Request, cron_secret: str | None) -> bool:
    """Without a configured secret the endpoint is open."""
    if not cron_secret:
        return True
    header = request.headers.get("authorization", "")
    return hmac.compare_digest(header.encode(), f"Bearer {cron_secret}".encode())


@router.api_route(
    "/publisher",
    methods=["GET", "POST"],
    response_model=SweepResponseDTO,
    summary="Publish due scheduled posts",
)
async def run_sweep(
    request: Request,
    config: Settings = Depends(get_settings),
    dispatcher: ScheduledDispatcher = Depends(get_dispatcher),
) -> JSONResponse:
    if not is_authorized(request, config.cron_secret):
        logger.warning("Rejected unauthorized sweep trigger")
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": "Unauthorized"})

    sid = new_sweep_id()
    try:
        result = await dispatcher.sweep()
    except Exception as e:
        logger.error("Sweep failed", sweep_id=sid, error=str(e), exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(e) or "Publisher failed"},
        )

    return JSONResponse(content=result.to_dict())
