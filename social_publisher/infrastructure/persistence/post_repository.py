from collections.abc import Collection
from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ...application.ports import PostRepository
from ...domain.entities import PostStatus, ScheduledPost
from .models import ContentModel, aware_utc


class SqlAlchemyPostRepository(PostRepository):
    """SQL implementation of PostRepository.

    Status changes are single conditional UPDATE statements, committed
    immediately so each post's outcome is durable on its own.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, post: ScheduledPost) -> None:
        """Insert a post. Content creation normally happens upstream."""
        self._session.add(ContentModel.from_entity(post))
        await self._session.commit()

    async def find_due_posts(self, now: datetime, limit: int) -> list[ScheduledPost]:
        stmt = (
            select(ContentModel)
            .where(
                ContentModel.status == PostStatus.SCHEDULED.value,
                ContentModel.scheduled_at <= aware_utc(now),
            )
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return [model.to_entity() for model in result.scalars()]

    async def get_for_owner(self, post_id: str, owner_id: str) -> ScheduledPost | None:
        stmt = select(ContentModel).where(
            ContentModel.id == post_id,
            ContentModel.user_id == owner_id,
        ).execution_options(populate_existing=True)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def update_status(
        self,
        post_id: str,
        status: PostStatus,
        published_at: datetime | None = None,
        error: str | None = None,
        expected: Collection[PostStatus] | None = None,
    ) -> bool:
        values: dict = {"status": status.value, "updated_at": datetime.now(UTC)}
        if status == PostStatus.PUBLISHED:
            values["published_at"] = aware_utc(published_at or datetime.now(UTC))
            values["last_error"] = None
        elif status == PostStatus.FAILED:
            values["last_error"] = error

        stmt = update(ContentModel).where(ContentModel.id == post_id)
        if expected is not None:
            stmt = stmt.where(ContentModel.status.in_([s.value for s in expected]))

        result = await self._session.execute(stmt.values(**values))
        await self._session.commit()
        return result.rowcount > 0

    async def reschedule(
        self,
        post_id: str,
        scheduled_at: datetime,
        expected: Collection[PostStatus],
    ) -> bool:
        stmt = (
            update(ContentModel)
            .where(
                ContentModel.id == post_id,
                ContentModel.status.in_([s.value for s in expected]),
            )
            .values(
                status=PostStatus.SCHEDULED.value,
                scheduled_at=aware_utc(scheduled_at),
                last_error=None,
                updated_at=datetime.now(UTC),
            )
        )
        result = await self._session.execute(stmt)
        await self._session.commit()
        return result.rowcount > 0

    async def fail_stale_claims(self, claimed_before: datetime, error: str) -> list[str]:
        cutoff = aware_utc(claimed_before)
        stale = await self._session.execute(
            select(ContentModel.id).where(
                ContentModel.status == PostStatus.PUBLISHING.value,
                ContentModel.updated_at < cutoff,
            )
        )

        released: list[str] = []
        for post_id in stale.scalars().all():
            # Re-check the claim so a post resolved meanwhile is left alone
            result = await self._session.execute(
                update(ContentModel)
                .where(
                    ContentModel.id == post_id,
                    ContentModel.status == PostStatus.PUBLISHING.value,
                    ContentModel.updated_at < cutoff,
                )
                .values(
                    status=PostStatus.FAILED.value,
                    last_error=error,
                    updated_at=datetime.now(UTC),
                )
            )
            if result.rowcount > 0:
                released.append(post_id)
        await self._session.commit()
        return released
