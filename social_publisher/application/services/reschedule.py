from datetime import UTC, datetime

import structlog

from ...domain.entities import RESCHEDULABLE
from ...domain.errors import PostNotFoundError, PostStateError
from ..ports import PostRepository

logger = structlog.get_logger()


class ReschedulePostService:
    """Moves a draft or failed post (back) into the scheduled state."""

    def __init__(self, posts: PostRepository) -> None:
        self._posts = posts

    async def execute(self, user_id: str, post_id: str, scheduled_at: datetime) -> datetime:
        post = await self._posts.get_for_owner(post_id, user_id)
        if post is None:
            raise PostNotFoundError(post_id)
        if not post.can_reschedule():
            raise PostStateError(post_id, post.status.value, "reschedule")

        if scheduled_at.tzinfo is None:
            scheduled_at = scheduled_at.replace(tzinfo=UTC)

        updated = await self._posts.reschedule(post_id, scheduled_at, expected=RESCHEDULABLE)
        if not updated:
            # Status changed between the read and the write
            raise PostStateError(post_id, post.status.value, "reschedule")

        logger.info(
            "Post rescheduled",
            post_id=post_id,
            previous_status=post.status.value,
            scheduled_at=scheduled_at.isoformat(),
        )
        return scheduled_at
