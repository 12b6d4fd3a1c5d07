from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from social_publisher.application.ports import OAuthExchange, OAuthGrant
from social_publisher.application.services import ConnectAccountService, ReschedulePostService
from social_publisher.config import Settings
from social_publisher.domain.entities import PostStatus
from social_publisher.domain.errors import OAuthError, OAuthStage
from social_publisher.domain.value_objects import Platform
from social_publisher.infrastructure.oauth import MetaOAuthConfig, MetaOAuthExchange, encode_state
from social_publisher.main import app
from social_publisher.presentation.api.dependencies import (
    get_connect_service,
    get_dispatcher,
    get_reschedule_service,
    get_settings,
)
from social_publisher.presentation.middleware import AuthenticatedUser, require_auth

TEST_SETTINGS = Settings(
    cron_secret="s3cret",
    secret_key="state-key",
    app_base_url="https://app.example.com",
    public_api_url="https://api.example.com",
)


class StubExchange(OAuthExchange):
    def __init__(self, platform: Platform, error: Exception | None = None):
        self._platform = platform
        self._error = error
        self.calls: list[tuple[str, str]] = []

    @property
    def platform(self) -> Platform:
        return self._platform

    async def exchange(self, code: str, redirect_uri: str) -> OAuthGrant:
        self.calls.append((code, redirect_uri))
        if self._error:
            raise self._error
        return OAuthGrant(access_token="tok", platform_account_id="acct-9", display_name="Acct")


@pytest.fixture
def exchanges():
    return {
        Platform.FACEBOOK: MetaOAuthExchange(MetaOAuthConfig(client_id="app", client_secret="secret")),
        Platform.LINKEDIN: StubExchange(Platform.LINKEDIN),
        Platform.INSTAGRAM: StubExchange(
            Platform.INSTAGRAM,
            error=OAuthError(
                "instagram", OAuthStage.ACCOUNT_RESOLUTION, "No Instagram", code="no_instagram"
            ),
        ),
    }


@pytest.fixture
def client(dispatcher, post_repository, credential_repository, exchanges):
    app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_connect_service] = lambda: ConnectAccountService(
        credential_repository, exchanges
    )
    app.dependency_overrides[get_reschedule_service] = lambda: ReschedulePostService(post_repository)
    app.dependency_overrides[require_auth] = lambda: AuthenticatedUser(sub="user-1")
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
        assert response.headers["X-Request-ID"]

    def test_client_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-42.a_b"})

        assert response.headers["X-Request-ID"] == "req-42.a_b"

    def test_malformed_request_id_is_replaced(self, client):
        forged = "abc */ DROP TABLE content; /*"

        response = client.get("/health", headers={"X-Request-ID": forged})

        assert response.headers["X-Request-ID"] != forged
        assert len(response.headers["X-Request-ID"]) == 36


class TestPublisherSweep:
    def test_requires_cron_secret(self, client):
        response = client.get("/api/v1/social/publisher")

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_wrong_secret(self, client):
        response = client.post(
            "/api/v1/social/publisher", headers={"Authorization": "Bearer nope"}
        )

        assert response.status_code == 401

    def test_sweep_summary(self, client, post_repository, credential_repository, make_post, make_credential):
        credential_repository.credentials[("user-1", Platform.LINKEDIN)] = make_credential()
        long_ago = datetime(2024, 1, 1, tzinfo=UTC)
        post_repository.add(make_post("p1", scheduled_at=long_ago))
        post_repository.add(make_post("p2", platform=Platform.FACEBOOK, scheduled_at=long_ago))

        response = client.get(
            "/api/v1/social/publisher", headers={"Authorization": "Bearer s3cret"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["processed"] == 2
        assert body["published"] == 1
        assert body["failed"] == 1
        assert body["errors"] == ["No facebook account connected for post p2"]

    def test_sweep_failure_returns_500(self, client, post_repository):
        async def broken(now, limit):
            raise RuntimeError("database unavailable")

        post_repository.find_due_posts = broken

        response = client.post(
            "/api/v1/social/publisher", headers={"Authorization": "Bearer s3cret"}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "database unavailable"}


class TestPublishNow:
    def test_success(self, client, post_repository, credential_repository, make_post, make_credential):
        credential_repository.credentials[("user-1", Platform.LINKEDIN)] = make_credential()
        post_repository.add(make_post("c1", text="Launch day!", hashtags=["#new"], status=PostStatus.DRAFT))

        response = client.post(
            "/api/v1/social/publish", json={"contentId": "c1", "platform": "linkedin"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "postId": "urn:123",
            "id": "urn:123",
            "platform": "linkedin",
        }
        assert post_repository.posts["c1"].status == PostStatus.PUBLISHED

    def test_missing_fields(self, client):
        response = client.post("/api/v1/social/publish", json={"platform": "linkedin"})

        assert response.status_code == 400
        assert "contentId" in response.json()["error"]

    def test_unknown_content(self, client):
        response = client.post(
            "/api/v1/social/publish", json={"contentId": "nope", "platform": "linkedin"}
        )

        assert response.status_code == 404
        assert response.json() == {"error": "Content nope not found"}

    def test_missing_account(self, client, post_repository, make_post):
        post_repository.add(make_post("c1"))

        response = client.post(
            "/api/v1/social/publish", json={"contentId": "c1", "platform": "linkedin"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "No linkedin account connected"}

    def test_expired_token(self, client, post_repository, credential_repository, make_post, make_credential, now):
        credential_repository.credentials[("user-1", Platform.LINKEDIN)] = make_credential(
            expires_at=now.replace(year=2020)
        )
        post_repository.add(make_post("c1"))

        response = client.post(
            "/api/v1/social/publish", json={"contentId": "c1", "platform": "linkedin"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Access token expired. Please reconnect your account."}

    def test_instagram_without_image(self, client, post_repository, credential_repository, make_post, make_credential):
        credential_repository.credentials[("user-1", Platform.INSTAGRAM)] = make_credential(
            platform=Platform.INSTAGRAM
        )
        post_repository.add(make_post("c1", platform=Platform.INSTAGRAM))

        response = client.post(
            "/api/v1/social/publish", json={"contentId": "c1", "platform": "instagram"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Instagram posts require an image"}

    def test_platform_failure(self, client, post_repository, credential_repository, make_post, make_credential, adapters):
        credential_repository.credentials[("user-1", Platform.LINKEDIN)] = make_credential()
        adapters[Platform.LINKEDIN].fail_on.add("Hello")
        post_repository.add(make_post("c1"))

        response = client.post(
            "/api/v1/social/publish", json={"contentId": "c1", "platform": "linkedin"}
        )

        assert response.status_code == 500
        assert response.json()["error"].startswith("Failed to publish to linkedin")
        assert post_repository.posts["c1"].status == PostStatus.FAILED

    def test_already_published(self, client, post_repository, make_post):
        post_repository.add(make_post("c1", status=PostStatus.PUBLISHED))

        response = client.post(
            "/api/v1/social/publish", json={"contentId": "c1", "platform": "linkedin"}
        )

        assert response.status_code == 409

    def test_requires_authentication(self, client):
        del app.dependency_overrides[require_auth]

        response = client.post(
            "/api/v1/social/publish", json={"contentId": "c1", "platform": "linkedin"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}
        assert response.headers["WWW-Authenticate"] == "Bearer"


class TestAccounts:
    def test_list_hides_tokens(self, client, credential_repository, make_credential):
        credential_repository.credentials[("user-1", Platform.LINKEDIN)] = make_credential(
            access_token="secret-token"
        )

        response = client.get("/api/v1/social/accounts")

        assert response.status_code == 200
        accounts = response.json()["accounts"]
        assert len(accounts) == 1
        assert accounts[0]["platform"] == "linkedin"
        assert accounts[0]["accountId"] == "acct-1"
        assert "secret-token" not in response.text

    def test_disconnect(self, client, credential_repository, make_credential):
        credential_repository.credentials[("user-1", Platform.LINKEDIN)] = make_credential()

        first = client.delete("/api/v1/social/accounts/linkedin")
        second = client.delete("/api/v1/social/accounts/linkedin")

        assert first.json() == {"success": True}
        assert second.status_code == 404


class TestOAuthCallback:
    def location(self, response) -> tuple[str, dict]:
        url = urlparse(response.headers["location"])
        return f"{url.scheme}://{url.netloc}{url.path}", parse_qs(url.query)

    def test_success_stores_credential(self, client, credential_repository, exchanges):
        state = encode_state("user-1", "linkedin", TEST_SETTINGS.secret_key)

        response = client.get(
            "/api/v1/social/callback",
            params={"code": "auth-code", "state": state},
            follow_redirects=False,
        )

        base, query = self.location(response)
        assert response.status_code == 307
        assert base == "https://app.example.com/dashboard/accounts"
        assert query == {"success": ["true"], "platform": ["linkedin"]}
        assert exchanges[Platform.LINKEDIN].calls == [
            ("auth-code", "https://api.example.com/api/v1/social/callback")
        ]
        assert ("user-1", Platform.LINKEDIN) in credential_repository.credentials

    def test_provider_error(self, client):
        response = client.get(
            "/api/v1/social/callback", params={"error": "access_denied"}, follow_redirects=False
        )

        assert self.location(response)[1] == {"error": ["access_denied"]}

    def test_missing_params(self, client):
        response = client.get(
            "/api/v1/social/callback", params={"code": "x"}, follow_redirects=False
        )

        assert self.location(response)[1] == {"error": ["missing_params"]}

    def test_forged_state(self, client, credential_repository):
        state = encode_state("user-2", "linkedin", "not-the-key")

        response = client.get(
            "/api/v1/social/callback",
            params={"code": "x", "state": state},
            follow_redirects=False,
        )

        assert self.location(response)[1] == {"error": ["invalid_state"]}
        assert credential_repository.credentials == {}

    def test_unknown_platform(self, client):
        state = encode_state("user-1", "myspace", TEST_SETTINGS.secret_key)

        response = client.get(
            "/api/v1/social/callback",
            params={"code": "x", "state": state},
            follow_redirects=False,
        )

        assert self.location(response)[1] == {"error": ["invalid_platform"]}

    def test_exchange_failure_code(self, client, credential_repository):
        state = encode_state("user-1", "instagram", TEST_SETTINGS.secret_key)

        response = client.get(
            "/api/v1/social/callback",
            params={"code": "x", "state": state},
            follow_redirects=False,
        )

        assert self.location(response)[1] == {"error": ["no_instagram"]}
        assert credential_repository.credentials == {}


class TestSchedule:
    def test_reschedule_failed_content(self, client, post_repository, make_post):
        post_repository.add(make_post("c1", status=PostStatus.FAILED))

        response = client.post(
            "/api/v1/content/schedule",
            json={"contentId": "c1", "scheduledAt": "2026-10-19T09:00:00Z"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["status"] == "scheduled"
        assert body["scheduledAt"].startswith("2026-10-19T09:00:00")
        assert post_repository.posts["c1"].status == PostStatus.SCHEDULED

    def test_published_content_conflict(self, client, post_repository, make_post):
        post_repository.add(make_post("c1", status=PostStatus.PUBLISHED))

        response = client.post(
            "/api/v1/content/schedule",
            json={"contentId": "c1", "scheduledAt": "2026-10-19T09:00:00Z"},
        )

        assert response.status_code == 409


class TestOAuthCallbackFailures:
    def redirect_query(self, response) -> dict:
        assert response.status_code == 307
        return parse_qs(urlparse(response.headers["location"]).query)

    def test_non_json_provider_response_redirects(self, client, credential_repository):
        state = encode_state("user-1", "facebook", TEST_SETTINGS.secret_key)
        not_json = MagicMock()
        not_json.raise_for_status = MagicMock()
        not_json.json.side_effect = ValueError("Expecting value")

        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(return_value=not_json)

            response = client.get(
                "/api/v1/social/callback",
                params={"code": "c", "state": state},
                follow_redirects=False,
            )

        assert self.redirect_query(response) == {"error": ["oauth_failed"]}
        assert credential_repository.credentials == {}

    def test_unexpected_error_redirects(self, client, exchanges, credential_repository):
        exchanges[Platform.LINKEDIN]._error = RuntimeError("connection pool exhausted")
        state = encode_state("user-1", "linkedin", TEST_SETTINGS.secret_key)

        response = client.get(
            "/api/v1/social/callback",
            params={"code": "c", "state": state},
            follow_redirects=False,
        )

        assert self.redirect_query(response) == {"error": ["oauth_failed"]}
        assert credential_repository.credentials == {}
