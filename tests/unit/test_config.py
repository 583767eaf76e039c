"""Unit tests for settings and the provider registry builder."""

from pydantic import SecretStr

from loginlab.config import (
    AuthSettings,
    CorsSettings,
    OAuthProviderSettings,
    Settings,
    build_provider_registry,
    read_git_sha,
)
from loginlab.domain.value import AuthProvider
from tests.settings import make_test_settings


def settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestDerivedUrls:
    """Tests for URLs derived from host and environment."""

    def test_local_callback_urls(self):
        s = settings(environment="development", host="localhost", port=8123)

        assert s.api.base_url == "http://localhost:8123"
        assert s.auth.github.redirect_uri == "http://localhost:8123/callback/github"

    def test_production_uses_https_without_port(self):
        s = settings(environment="production", host="login.example.com")

        assert s.api.base_url == "https://login.example.com"
        assert s.auth.reddit.redirect_uri == "https://login.example.com/callback/reddit"

    def test_explicit_redirect_uri_is_kept(self):
        s = settings(
            auth=AuthSettings(
                google=OAuthProviderSettings(redirect_uri="https://elsewhere/cb")
            )
        )

        assert s.auth.google.redirect_uri == "https://elsewhere/cb"


class TestCors:
    def test_wildcard_dropped_in_production(self):
        s = settings(
            environment="production",
            host="login.example.com",
            cors=CorsSettings(origins=["*", "https://app.example.com"]),
        )

        assert s.cors_origins() == ["https://app.example.com"]

    def test_wildcard_allowed_in_development(self):
        assert settings(environment="development").cors_origins() == ["*"]


class TestProviderRegistry:
    """Tests for build_provider_registry."""

    def test_only_fully_configured_providers(self):
        s = settings(
            auth=AuthSettings(
                github=OAuthProviderSettings(
                    client_id="id", client_secret=SecretStr("secret")
                ),
                google=OAuthProviderSettings(client_id="id-only"),
                reddit=OAuthProviderSettings(
                    client_id="id", client_secret=SecretStr("")
                ),
            )
        )

        registry = build_provider_registry(s)

        assert registry.available() == [AuthProvider.GITHUB]
        creds = registry.get("github")
        assert creds.redirect_uri == "http://localhost:8000/callback/github"
        assert creds.client_secret.get_secret_value() == "secret"

    def test_test_settings_configure_every_provider(self):
        registry = build_provider_registry(make_test_settings())

        assert registry.available() == list(AuthProvider)


class TestGitSha:
    def test_reads_version_file(self, tmp_path):
        path = tmp_path / "version.txt"
        path.write_text("abc123\n")

        assert read_git_sha(path) == "abc123"

    def test_missing_file_is_unknown(self, tmp_path):
        assert read_git_sha(tmp_path / "missing.txt") == "unknown"
