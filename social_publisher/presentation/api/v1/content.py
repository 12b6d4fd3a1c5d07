from fastapi import APIRouter, Depends

from ....application.dtos import RescheduleRequestDTO
from ....application.services import ReschedulePostService
from ...middleware import AuthenticatedUser, require_auth
from ..dependencies import get_reschedule_service

router = APIRouter(prefix="/content", tags=["content"])


@router.post(
    "/schedule",
    summary="Schedule or reschedule content",
    description="Set a new publish time. Failed content re-enters the scheduled state.",
)
async def schedule_content(
    request: RescheduleRequestDTO,
    user: AuthenticatedUser = Depends(require_auth),
    service: ReschedulePostService = Depends(get_reschedule_service),
) -> dict:
    scheduled_at = await service.execute(user.user_id, request.content_id, request.scheduled_at)
    return {
        "success": True,
        "contentId": request.content_id,
        "status": "scheduled",
        "scheduledAt": scheduled_at.isoformat(),
    }
