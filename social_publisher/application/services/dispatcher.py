"""
Scheduled dispatcher.

Publishes posts either on demand (publish_now) or in periodic batch
sweeps. Both entry points share one publish path. Posts are processed one
at a time; in a sweep, a failure is recorded on its post and never stops
the remaining posts.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import structlog

from ...domain.entities import (
    MANUALLY_PUBLISHABLE,
    PostStatus,
    ScheduledPost,
)
from ...domain.errors import (
    CredentialExpiredError,
    CredentialMissingError,
    PostNotFoundError,
    PostStateError,
    UnsupportedPlatformError,
)
from ...domain.value_objects import Platform
from ...infrastructure.logging import Timer
from ..ports import CredentialRepository, PostRepository
from .publish_router import PublishResult, PublishRouter

logger = structlog.get_logger()

DEFAULT_BATCH_SIZE = 50

# Longer than the slowest publish (Instagram makes two timed-out calls at worst)
DEFAULT_CLAIM_TIMEOUT = timedelta(minutes=10)

STALE_CLAIM_ERROR = "Publish attempt did not complete; check the platform before retrying"


@dataclass
class SweepResult:
    """Counts for one sweep. errors is informational."""

    processed: int = 0
    published: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": True,
            "processed": self.processed,
            "published": self.published,
            "failed": self.failed,
            "errors": list(self.errors),
        }


class ScheduledDispatcher:
    """Finds due posts, resolves credentials and publishes through the router."""

    def __init__(
        self,
        posts: PostRepository,
        credentials: CredentialRepository,
        router: PublishRouter,
        batch_size: int = DEFAULT_BATCH_SIZE,
        claim_timeout: timedelta = DEFAULT_CLAIM_TIMEOUT,
    ) -> None:
        self._posts = posts
        self._credentials = credentials
        self._router = router
        self._batch_size = batch_size
        self._claim_timeout = claim_timeout

    async def publish_now(
        self,
        user_id: str,
        post_id: str,
        platform: Platform | str,
    ) -> PublishResult:
        """
        Publish one post immediately on behalf of its owner.

        Any failure after the post is claimed marks it failed and is re-raised,
        so the caller can report it. A failed post can be published again.

        Raises:
            PostNotFoundError: The post does not exist or is not owned by user_id
            PostStateError: The post is already published or being published
            CredentialMissingError, CredentialExpiredError, PreconditionError,
            PublishError: Propagated after marking the post failed
        """
        try:
            target = Platform.parse(platform)
        except ValueError:
            raise UnsupportedPlatformError(str(platform)) from None

        post = await self._posts.get_for_owner(post_id, user_id)
        if post is None:
            raise PostNotFoundError(post_id)

        claimed = await self._posts.update_status(
            post_id, PostStatus.PUBLISHING, expected=MANUALLY_PUBLISHABLE
        )
        if not claimed:
            raise PostStateError(post_id, post.status.value, "publish")

        log = logger.bind(post_id=post_id, user_id=user_id)
        try:
            result = await self._publish(post, target, datetime.now(UTC))
        except Exception as e:
            log.warning("Manual publish failed", error=str(e))
            try:
                await self._posts.update_status(
                    post_id,
                    PostStatus.FAILED,
                    error=str(e),
                    expected={PostStatus.PUBLISHING},
                )
            except Exception as store_error:
                # The publish error is what the caller needs; the claim is
                # released by the next sweep.
                log.error(
                    "Failed to record publish failure",
                    error=str(store_error),
                    exc_info=True,
                )
            raise

        try:
            await self._posts.update_status(
                post_id,
                PostStatus.PUBLISHED,
                published_at=datetime.now(UTC),
                expected={PostStatus.PUBLISHING},
            )
        except Exception as e:
            # The post is live on the platform; report success and leave the
            # claim to be released by the next sweep.
            log.error(
                "Published but failed to record status",
                external_id=result.id,
                error=str(e),
                exc_info=True,
            )
            return result

        log.info("Manual publish succeeded", platform=result.platform.value, external_id=result.id)
        return result

    async def sweep(self, now: datetime | None = None) -> SweepResult:
        """
        Publish every due scheduled post, up to the batch size.

        Posts left in publishing for longer than the claim timeout are
        marked failed first, so an interrupted attempt can be retried.

        Args:
            now: Sweep start time; defaults to the current UTC time and is
                recorded as published_at for posts published in this sweep

        Returns:
            SweepResult with processed, published and failed counts
        """
        now = now or datetime.now(UTC)
        result = SweepResult()

        logger.info("Checking for due posts", timestamp=now.isoformat())

        with Timer() as t:
            released = await self._posts.fail_stale_claims(
                now - self._claim_timeout, STALE_CLAIM_ERROR
            )
            for post_id in released:
                logger.warning("Released stale publishing claim", post_id=post_id)

            posts = await self._posts.find_due_posts(now, self._batch_size)
            result.processed = len(posts)

            for post in posts:
                try:
                    await self._sweep_one(post, now, result)
                except Exception as e:
                    logger.error("Failed to process post", post_id=post.id, error=str(e))
                    result.errors.append(f"Post {post.id}: {e}")

        logger.info(
            "Sweep completed",
            processed=result.processed,
            published=result.published,
            failed=result.failed,
            duration_ms=t.duration_ms,
        )
        return result

    async def _sweep_one(self, post: ScheduledPost, now: datetime, result: SweepResult) -> None:
        log = logger.bind(post_id=post.id, platform=post.platform.value)

        claimed = await self._posts.update_status(
            post.id, PostStatus.PUBLISHING, expected={PostStatus.SCHEDULED}
        )
        if not claimed:
            # Another publish attempt owns it now
            log.info("Post no longer scheduled, skipping")
            return

        try:
            published = await self._publish(post, post.platform, now)
        except CredentialMissingError:
            log.error("No connected account", user_id=post.owner_id)
            await self._record_failure(
                post, f"No {post.platform.value} account connected for post {post.id}", result
            )
        except CredentialExpiredError:
            log.error("Expired token", user_id=post.owner_id)
            await self._record_failure(post, f"Expired token for post {post.id}", result)
        except Exception as e:
            log.error("Failed to publish post", error=str(e))
            await self._record_failure(post, f"Post {post.id}: {e}", result)
        else:
            result.published += 1
            try:
                await self._posts.update_status(
                    post.id,
                    PostStatus.PUBLISHED,
                    published_at=now,
                    expected={PostStatus.PUBLISHING},
                )
            except Exception as e:
                log.error(
                    "Published but failed to record status",
                    external_id=published.id,
                    error=str(e),
                    exc_info=True,
                )
                result.errors.append(
                    f"Post {post.id}: published as {published.id} but status update failed: {e}"
                )
                return
            log.info("Published post", external_id=published.id)

    async def _publish(
        self, post: ScheduledPost, platform: Platform, now: datetime
    ) -> PublishResult:
        credential = await self._credentials.get_credential(post.owner_id, platform)
        if credential is None:
            raise CredentialMissingError(platform.value, post.owner_id)
        if credential.is_expired(now):
            raise CredentialExpiredError(platform.value)

        return await self._router.publish(
            platform=platform,
            access_token=credential.access_token,
            account_id=credential.platform_account_id,
            content=post.content,
        )

    async def _record_failure(self, post: ScheduledPost, error: str, result: SweepResult) -> None:
        result.failed += 1
        result.errors.append(error)
        await self._posts.update_status(
            post.id, PostStatus.FAILED, error=error, expected={PostStatus.PUBLISHING}
        )
