from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from ..value_objects import Platform, PostContent


class PostStatus(str, Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHING = "publishing"
    PUBLISHED = "published"
    FAILED = "failed"


# Statuses a publish attempt may start from.
MANUALLY_PUBLISHABLE = frozenset({PostStatus.DRAFT, PostStatus.SCHEDULED, PostStatus.FAILED})
RESCHEDULABLE = frozenset({PostStatus.DRAFT, PostStatus.SCHEDULED, PostStatus.FAILED})


@dataclass
class ScheduledPost:
    """Publishing view of a generated content record."""

    id: str
    owner_id: str
    platform: Platform
    body_text: str
    hashtags: list[str] = field(default_factory=list)
    image_url: str | None = None
    status: PostStatus = PostStatus.DRAFT
    scheduled_at: datetime | None = None
    published_at: datetime | None = None
    last_error: str | None = None

    @property
    def content(self) -> PostContent:
        return PostContent(
            text=self.body_text,
            hashtags=tuple(self.hashtags),
            image_url=self.image_url,
        )

    def is_due(self, now: datetime | None = None) -> bool:
        """A post is due when it is scheduled and its time has come."""
        if self.status != PostStatus.SCHEDULED or self.scheduled_at is None:
            return False
        return self.scheduled_at <= (now or datetime.now(UTC))

    def can_publish_manually(self) -> bool:
        return self.status in MANUALLY_PUBLISHABLE

    def can_reschedule(self) -> bool:
        return self.status in RESCHEDULABLE
