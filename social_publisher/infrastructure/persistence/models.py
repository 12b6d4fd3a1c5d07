from datetime import UTC, datetime
from typing import overload
from uuid import uuid4

from sqlalchemy import JSON, DateTime, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ...domain.entities import PostStatus, ScheduledPost, SocialCredential
from ...domain.value_objects import Platform


@overload
def aware_utc(dt: datetime) -> datetime: ...


@overload
def aware_utc(dt: None) -> None: ...


def aware_utc(dt: datetime | None) -> datetime | None:
    """Attach or convert to UTC; some drivers return naive datetimes."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _new_id() -> str:
    return str(uuid4())


class Base(DeclarativeBase):
    pass


class SocialAccountModel(Base):
    """SQLAlchemy model for SocialCredential."""

    __tablename__ = "social_accounts"
    __table_args__ = (UniqueConstraint("user_id", "platform", name="uq_social_accounts_user_platform"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    platform: Mapped[str] = mapped_column(String(50), nullable=False)
    account_id: Mapped[str] = mapped_column(String(255), nullable=False)
    account_name: Mapped[str | None] = mapped_column(String(255))
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def apply(self, credential: SocialCredential) -> None:
        """Copy credential fields onto this row."""
        self.account_id = credential.platform_account_id
        self.account_name = credential.display_name
        self.access_token = credential.access_token
        self.expires_at = aware_utc(credential.expires_at)
        self.updated_at = aware_utc(credential.updated_at)

    @classmethod
    def from_entity(cls, credential: SocialCredential) -> "SocialAccountModel":
        model = cls(user_id=credential.user_id, platform=credential.platform.value)
        model.apply(credential)
        return model

    def to_entity(self) -> SocialCredential:
        return SocialCredential(
            user_id=self.user_id,
            platform=Platform(self.platform),
            platform_account_id=self.account_id,
            access_token=self.access_token,
            expires_at=aware_utc(self.expires_at),
            display_name=self.account_name,
            updated_at=aware_utc(self.updated_at),
        )


class ContentModel(Base):
    """SQLAlchemy model for generated content, mapped to ScheduledPost."""

    __tablename__ = "content"
    __table_args__ = (Index("ix_content_status_scheduled_at", "status", "scheduled_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    platform: Mapped[str] = mapped_column(String(50), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    hashtags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    image_url: Mapped[str | None] = mapped_column(String(2048))
    status: Mapped[str] = mapped_column(String(50), nullable=False, default=PostStatus.DRAFT.value)
    scheduled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_error: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )

    @classmethod
    def from_entity(cls, post: ScheduledPost) -> "ContentModel":
        return cls(
            id=post.id,
            user_id=post.owner_id,
            platform=post.platform.value,
            text=post.body_text,
            hashtags=list(post.hashtags),
            image_url=post.image_url,
            status=post.status.value,
            scheduled_at=aware_utc(post.scheduled_at),
            published_at=aware_utc(post.published_at),
            last_error=post.last_error,
        )

    def to_entity(self) -> ScheduledPost:
        return ScheduledPost(
            id=self.id,
            owner_id=self.user_id,
            platform=Platform(self.platform),
            body_text=self.text,
            hashtags=list(self.hashtags or []),
            image_url=self.image_url,
            status=PostStatus(self.status),
            scheduled_at=aware_utc(self.scheduled_at),
            published_at=aware_utc(self.published_at),
            last_error=self.last_error,
        )
