"""
Outbound port for scheduled post persistence.

Status writes go through update_status, which supports a conditional
("only if the status is still one of ...") transition so overlapping
publish attempts on one post cannot both proceed.
"""

from abc import ABC, abstractmethod
from collections.abc import Collection
from datetime import datetime

from ...domain.entities import PostStatus, ScheduledPost


class PostRepository(ABC):
    """Outbound port for post persistence."""

    @abstractmethod
    async def find_due_posts(self, now: datetime, limit: int) -> list[ScheduledPost]:
        """
        Find posts with status scheduled and scheduled_at <= now.

        Args:
            now: Cut-off time
            limit: Maximum number of posts returned

        Returns:
            Due posts in the store's default order
        """
        ...

    @abstractmethod
    async def get_for_owner(self, post_id: str, owner_id: str) -> ScheduledPost | None:
        """Retrieve a post if it exists and belongs to owner_id."""
        ...

    @abstractmethod
    async def update_status(
        self,
        post_id: str,
        status: PostStatus,
        published_at: datetime | None = None,
        error: str | None = None,
        expected: Collection[PostStatus] | None = None,
    ) -> bool:
        """
        Update the status of a post.

        Args:
            post_id: Post to update
            status: New status
            published_at: Publication time, set when status is published
            error: Failure reason, recorded when status is failed
            expected: If given, only update when the current status is one of these

        Returns:
            True if the post was updated
        """
        ...

    @abstractmethod
    async def reschedule(
        self,
        post_id: str,
        scheduled_at: datetime,
        expected: Collection[PostStatus],
    ) -> bool:
        """
        Move a post back to scheduled at a new time and clear its last error.

        Returns:
            True if the post was in one of the expected statuses and was updated
        """
        ...

    @abstractmethod
    async def fail_stale_claims(self, claimed_before: datetime, error: str) -> list[str]:
        """
        Mark posts stuck in publishing since before claimed_before as failed.

        A claim that was never resolved (crash mid-publish, or the final
        status write failed) would otherwise block the post forever.

        Returns:
            Ids of the posts that were released
        """
        ...
