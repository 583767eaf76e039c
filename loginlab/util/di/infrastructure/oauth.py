"""OAuth infrastructure providers."""

from dishka import Scope, provide

from loginlab.adapter.oauth import HttpxOAuthClient
from loginlab.config import AuthSettings
from loginlab.domain.service.auth_service import OAuthClient
from loginlab.util.di.base import ProviderBase


class OAuthProvider(ProviderBase):
    """OAuth component base."""

    __mock_component__ = "oauth"


class ProdOAuthProvider(OAuthProvider):
    """Production OAuth provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_oauth_client(self, auth_settings: AuthSettings) -> OAuthClient:
        """Provide the OAuth client shared by all providers.

        APP-scoped: PKCE verifiers issued at /auth must survive until the
        matching /callback request.
        """
        return HttpxOAuthClient(
            user_agent=auth_settings.reddit_user_agent,
            timeout=auth_settings.http_timeout,
        )
