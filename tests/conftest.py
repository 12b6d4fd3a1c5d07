from collections.abc import Collection
from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest

from social_publisher.application.ports import (
    AdapterResult,
    CredentialRepository,
    PostRepository,
    PublishAdapter,
)
from social_publisher.application.services import PublishRouter, ScheduledDispatcher
from social_publisher.domain.entities import PostStatus, ScheduledPost, SocialCredential
from social_publisher.domain.errors import PublishError
from social_publisher.domain.value_objects import Platform


class InMemoryPostRepository(PostRepository):
    """Dict-backed post store with the same conditional update semantics."""

    def __init__(self, posts: list[ScheduledPost] | None = None) -> None:
        self.posts: dict[str, ScheduledPost] = {p.id: p for p in posts or []}
        self.status_updates: list[tuple[str, PostStatus]] = []
        # Last status write per post; tests backdate it to age a claim
        self.updated_at: dict[str, datetime] = {}

    def add(self, post: ScheduledPost) -> None:
        self.posts[post.id] = post

    async def find_due_posts(self, now: datetime, limit: int) -> list[ScheduledPost]:
        due = [replace(p) for p in self.posts.values() if p.is_due(now)]
        return due[:limit]

    async def get_for_owner(self, post_id: str, owner_id: str) -> ScheduledPost | None:
        post = self.posts.get(post_id)
        if post is None or post.owner_id != owner_id:
            return None
        return replace(post)

    async def update_status(
        self,
        post_id: str,
        status: PostStatus,
        published_at: datetime | None = None,
        error: str | None = None,
        expected: Collection[PostStatus] | None = None,
    ) -> bool:
        post = self.posts.get(post_id)
        if post is None:
            return False
        if expected is not None and post.status not in expected:
            return False
        post.status = status
        if status == PostStatus.PUBLISHED:
            post.published_at = published_at
            post.last_error = None
        elif status == PostStatus.FAILED:
            post.last_error = error
        self.status_updates.append((post_id, status))
        self.updated_at[post_id] = datetime.now(UTC)
        return True

    async def reschedule(
        self,
        post_id: str,
        scheduled_at: datetime,
        expected: Collection[PostStatus],
    ) -> bool:
        post = self.posts.get(post_id)
        if post is None or post.status not in expected:
            return False
        post.status = PostStatus.SCHEDULED
        post.scheduled_at = scheduled_at
        post.last_error = None
        self.updated_at[post_id] = datetime.now(UTC)
        return True

    async def fail_stale_claims(self, claimed_before: datetime, error: str) -> list[str]:
        released = []
        for post in self.posts.values():
            claimed_at = self.updated_at.get(post.id)
            if post.status == PostStatus.PUBLISHING and claimed_at and claimed_at < claimed_before:
                post.status = PostStatus.FAILED
                post.last_error = error
                self.updated_at[post.id] = datetime.now(UTC)
                released.append(post.id)
        return released


class InMemoryCredentialRepository(CredentialRepository):
    def __init__(self, credentials: list[SocialCredential] | None = None) -> None:
        self.credentials: dict[tuple[str, Platform], SocialCredential] = {
            c.key: c for c in credentials or []
        }

    async def get_credential(self, user_id: str, platform: Platform) -> SocialCredential | None:
        return self.credentials.get((user_id, platform))

    async def upsert(self, credential: SocialCredential) -> None:
        self.credentials[credential.key] = credential

    async def delete(self, user_id: str, platform: Platform) -> bool:
        return self.credentials.pop((user_id, platform), None) is not None

    async def list_for_user(self, user_id: str) -> list[SocialCredential]:
        return [c for (uid, _), c in self.credentials.items() if uid == user_id]


class FakeAdapter(PublishAdapter):
    """Records calls; fails for messages listed in fail_on."""

    def __init__(
        self,
        platform: Platform,
        post_id: str = "ext-1",
        requires_image: bool = False,
        fail_on: set[str] | None = None,
    ) -> None:
        self._platform = platform
        self._post_id = post_id
        self.requires_image = requires_image
        self.fail_on = fail_on or set()
        self.calls: list[dict] = []

    @property
    def platform(self) -> Platform:
        return self._platform

    async def publish(self, access_token, account_id, message, image_url=None) -> AdapterResult:
        self.calls.append(
            {
                "access_token": access_token,
                "account_id": account_id,
                "message": message,
                "image_url": image_url,
            }
        )
        if message in self.fail_on:
            raise PublishError(self._platform.value, "API error 500: boom")
        return AdapterResult(id=self._post_id)


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 10, 18, 12, 0, tzinfo=UTC)


@pytest.fixture
def make_post(now):
    def _make(
        post_id: str = "post-1",
        owner_id: str = "user-1",
        platform: Platform = Platform.LINKEDIN,
        text: str = "Hello",
        hashtags: list[str] | None = None,
        image_url: str | None = None,
        status: PostStatus = PostStatus.SCHEDULED,
        scheduled_at: datetime | None = None,
    ) -> ScheduledPost:
        return ScheduledPost(
            id=post_id,
            owner_id=owner_id,
            platform=platform,
            body_text=text,
            hashtags=hashtags or [],
            image_url=image_url,
            status=status,
            scheduled_at=scheduled_at or now - timedelta(minutes=5),
        )

    return _make


@pytest.fixture
def make_credential():
    def _make(
        user_id: str = "user-1",
        platform: Platform = Platform.LINKEDIN,
        access_token: str = "tok",
        account_id: str = "acct-1",
        expires_at: datetime | None = None,
    ) -> SocialCredential:
        return SocialCredential(
            user_id=user_id,
            platform=platform,
            platform_account_id=account_id,
            access_token=access_token,
            expires_at=expires_at,
        )

    return _make


@pytest.fixture
def adapters() -> dict[Platform, FakeAdapter]:
    return {
        Platform.FACEBOOK: FakeAdapter(Platform.FACEBOOK, post_id="fb-1"),
        Platform.INSTAGRAM: FakeAdapter(Platform.INSTAGRAM, post_id="ig-1", requires_image=True),
        Platform.LINKEDIN: FakeAdapter(Platform.LINKEDIN, post_id="urn:123"),
    }


@pytest.fixture
def post_repository() -> InMemoryPostRepository:
    return InMemoryPostRepository()


@pytest.fixture
def credential_repository() -> InMemoryCredentialRepository:
    return InMemoryCredentialRepository()


@pytest.fixture
def dispatcher(post_repository, credential_repository, adapters) -> ScheduledDispatcher:
    return ScheduledDispatcher(
        posts=post_repository,
        credentials=credential_repository,
        router=PublishRouter(adapters),
    )
