"""API tests against the full application with mocked OAuth and storage."""

from urllib.parse import parse_qs, urlparse
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from loginlab.domain.value import AuthProvider
from loginlab.interface.api.app import create_app
from tests.di import build_test_container
from tests.settings import make_test_settings


def make_client(**settings_kwargs) -> TestClient:
    settings = make_test_settings(**settings_kwargs)
    container = build_test_container(settings=settings, with_fastapi=True)
    return TestClient(create_app(settings, container=container))


@pytest.fixture
def client() -> TestClient:
    return make_client()


def login(client: TestClient, provider: str = "github", code: str = "abc") -> dict:
    response = client.get(f"/callback/{provider}", params={"code": code})
    assert response.status_code == 200, response.text
    return response.json()


class TestHomeAndHealth:
    """Tests for / and /health."""

    def test_home_lists_configured_providers(self):
        client = make_client(providers=[AuthProvider.GITHUB, AuthProvider.REDDIT])

        response = client.get("/")

        assert response.status_code == 200
        body = response.json()
        assert body["service"] == "LoginLab API"
        assert [p["provider"] for p in body["providers"]] == ["github", "reddit"]
        assert body["providers"][0]["login_url"] == "http://localhost:8000/auth/github"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["environment"] == "test"
        assert body["uptime_seconds"] >= 0
        assert set(body["providers"]) == {p.value for p in AuthProvider}


class TestInitiateLogin:
    """Tests for GET /auth/{provider}."""

    def test_redirects_to_provider(self, client):
        response = client.get(
            "/auth/github", params={"state": "s-1"}, follow_redirects=False
        )

        assert response.status_code == 302
        location = response.headers["location"]
        assert location.startswith("https://github.com/login/oauth/authorize?")
        params = parse_qs(urlparse(location).query)
        assert params["state"] == ["s-1"]
        assert params["client_id"] == ["github-client-id"]

    def test_default_state_is_provider_prefixed(self, client):
        response = client.get("/auth/google", follow_redirects=False)

        state = parse_qs(urlparse(response.headers["location"]).query)["state"][0]
        assert state.startswith("google-")

    def test_unconfigured_provider_is_400(self):
        client = make_client(providers=[AuthProvider.GITHUB])

        response = client.get("/auth/google", follow_redirects=False)

        assert response.status_code == 400
        body = response.json()
        assert body["category"] == "unsupported_provider"
        assert body["available_providers"] == ["github"]
        assert body["path"] == "/auth/google"


class TestCallback:
    """Tests for GET /callback/{provider}."""

    def test_successful_callback(self, client):
        body = login(client, "github", "abc")

        assert body["message"] == "Successfully authenticated with github"
        assert body["provider"] == "github"
        assert body["user"]["provider_user_id"] == "1001"
        assert body["user"]["login_count"] == 1
        assert body["profile"]["login"] == "mockuser"
        assert body["tokens"]["has_refresh_token"] is True

    def test_callback_response_never_contains_tokens(self, client):
        response = client.get("/callback/github", params={"code": "zzz"})

        assert "mock-github-access-zzz" not in response.text
        assert "mock-github-refresh-zzz" not in response.text
        assert "access_token" not in response.json()["user"]

    def test_repeat_login_increments_count(self, client):
        first = login(client, "twitter", "a")
        second = login(client, "twitter", "b")

        assert second["user"]["id"] == first["user"]["id"]
        assert second["user"]["login_count"] == 2

    def test_provider_error_param(self, client):
        response = client.get(
            "/callback/github",
            params={"error": "access_denied", "error_description": "User said no"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["category"] == "provider_denied"
        assert "access_denied" in body["message"]

    def test_missing_code(self, client):
        response = client.get("/callback/github")

        assert response.status_code == 400
        assert response.json()["category"] == "missing_code"

    def test_unknown_provider(self, client):
        response = client.get("/callback/myspace", params={"code": "x"})

        assert response.status_code == 400
        assert response.json()["category"] == "unsupported_provider"


class TestUsers:
    """Tests for the /users routes."""

    def test_list_users(self, client):
        login(client, "github")
        login(client, "google")
        login(client, "github", "again")

        response = client.get("/users")

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert body["users"][0]["provider"] == "github"
        assert {s["provider"]: s["count"] for s in body["provider_stats"]} == {
            "github": 1,
            "google": 1,
        }
        assert "access_token" not in response.text

    def test_get_user(self, client):
        user = login(client, "reddit")["user"]

        response = client.get(f"/users/{user['id']}")

        assert response.status_code == 200
        assert response.json()["username"] == "mock_redditor"

    def test_get_unknown_user_is_404(self, client):
        response = client.get(f"/users/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["category"] == "not_found"

    def test_invalid_user_id_is_422(self, client):
        response = client.get("/users/not-a-uuid")

        assert response.status_code == 422

    def test_deactivate_user(self, client):
        user = login(client, "instagram")["user"]

        response = client.patch(f"/users/{user['id']}/deactivate")
        listing = client.get("/users").json()
        stats = client.get("/users/stats").json()
        fresh = login(client, "instagram")["user"]

        assert response.status_code == 200
        assert response.json()["message"] == "User deactivated successfully"
        assert response.json()["user"]["is_active"] is False
        assert listing["count"] == 0
        assert stats["total_users"] == 0
        assert fresh["id"] != user["id"]
        assert fresh["login_count"] == 1

    def test_deactivate_unknown_user_is_404(self, client):
        response = client.patch(f"/users/{uuid4()}/deactivate")

        assert response.status_code == 404

    def test_stats(self, client):
        login(client, "github")
        login(client, "twitter")

        response = client.get("/users/stats")

        assert response.status_code == 200
        body = response.json()
        assert body["total_users"] == 2
        assert len(body["provider_stats"]) == 2
        assert "timestamp" in body

    def test_reactivation_policy_reuses_record(self):
        client = make_client(reactivate_deactivated=True)
        user = login(client, "github")["user"]
        client.patch(f"/users/{user['id']}/deactivate")

        again = login(client, "github")["user"]

        assert again["id"] == user["id"]
        assert again["is_active"] is True
        assert again["login_count"] == 2


class TestSecurity:
    """Security headers on API responses."""

    def test_security_headers(self, client):
        response = client.get("/health")

        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
