from fastapi import APIRouter, Depends

from ....application.dtos import PublishRequestDTO, PublishResponseDTO
from ....application.services import ScheduledDispatcher
from ...middleware import AuthenticatedUser, require_auth
from ..dependencies import get_dispatcher

router = APIRouter(prefix="/social", tags=["publishing"])


@router.post(
    "/publish",
    response_model=PublishResponseDTO,
    summary="Publish content now",
    description=(
        "Publish a content record to a connected account immediately. "
        "On failure the content is marked failed and may be published again."
    ),
)
async def publish_now(
    request: PublishRequestDTO,
    user: AuthenticatedUser = Depends(require_auth),
    dispatcher: ScheduledDispatcher = Depends(get_dispatcher),
) -> PublishResponseDTO:
    result = await dispatcher.publish_now(
        user_id=user.user_id,
        post_id=request.content_id,
        platform=request.platform,
    )
    return PublishResponseDTO(post_id=result.id, id=result.id, platform=result.platform.value)
