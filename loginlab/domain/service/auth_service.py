"""Authentication domain service."""

import time

import logfire
from pydantic import SecretStr

from loginlab.domain.value import (
    AuthProvider,
    ProfileData,
    ProviderCredentials,
    ProviderRegistry,
    TokenBundle,
)

from .base import Service


class OAuthClientError(Exception):
    """Failure reported by an OAuth client implementation.

    Attributes:
        status_code: Upstream HTTP status, if a response was received
        detail: Upstream response body or transport error text
    """

    def __init__(
        self, message: str, status_code: int | None = None, detail: str | None = None
    ):
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class OAuthClient:
    """Generic OAuth client interface for all providers.

    Implementations own the protocol details; callers treat each method as a
    single black-box call.
    """

    async def authorization_url(
        self, credentials: ProviderCredentials, state: str
    ) -> str:
        """Build the provider authorization URL.

        Args:
            credentials: Client registration for the provider
            state: State parameter for CSRF protection

        Returns:
            Authorization URL to redirect user to
        """
        raise NotImplementedError

    async def exchange_code(
        self, credentials: ProviderCredentials, code: str, state: str | None = None
    ) -> TokenBundle:
        """Exchange an authorization code for a token bundle.

        Raises:
            OAuthClientError: If the provider rejects the exchange
        """
        raise NotImplementedError

    async def fetch_profile(
        self, provider: AuthProvider, access_token: SecretStr
    ) -> ProfileData:
        """Fetch the provider profile for an access token.

        Raises:
            OAuthClientError: If the provider rejects the request
        """
        raise NotImplementedError


class AuthService(Service):
    """Domain service for multi-provider authentication operations.

    Resolves providers against the configured registry and delegates the
    protocol work to the OAuth client.
    """

    def __init__(self, oauth_client: OAuthClient, registry: ProviderRegistry) -> None:
        """Initialize auth service.

        Args:
            oauth_client: OAuth client implementation
            registry: Configured providers and their credentials
        """
        self.oauth_client = oauth_client
        self.registry = registry

    def available_providers(self) -> list[AuthProvider]:
        """Providers with credentials configured."""
        return self.registry.available()

    def resolve_provider(self, provider: AuthProvider | str) -> AuthProvider:
        """Validate a provider name.

        Raises:
            UnsupportedProviderError: If provider not configured
        """
        return self.registry.resolve(provider)

    async def initiate_login(
        self, provider: AuthProvider | str, state: str | None = None
    ) -> str:
        """Initiate OAuth login flow for any provider.

        Args:
            provider: Authentication provider to use
            state: State parameter; defaults to ``{provider}-{epoch_ms}``

        Returns:
            Authorization URL to redirect user to

        Raises:
            UnsupportedProviderError: If provider not configured
        """
        credentials = self.registry.get(provider)
        auth_state = state or f"{credentials.provider.value}-{int(time.time() * 1000)}"
        url = await self.oauth_client.authorization_url(credentials, auth_state)
        logfire.info(
            "OAuth authorization initiated",
            provider=credentials.provider.value,
            state=auth_state,
        )
        return url

    async def exchange_code(
        self, provider: AuthProvider, code: str, state: str | None = None
    ) -> TokenBundle:
        """Exchange an authorization code for tokens.

        Raises:
            UnsupportedProviderError: If provider not configured
            OAuthClientError: If the provider rejects the exchange
        """
        credentials = self.registry.get(provider)
        with logfire.span("auth_service.exchange_code", provider=provider.value):
            return await self.oauth_client.exchange_code(credentials, code, state)

    async def fetch_profile(
        self, provider: AuthProvider, token_bundle: TokenBundle
    ) -> ProfileData:
        """Fetch the provider profile using the bundle's access token.

        Raises:
            OAuthClientError: If the provider rejects the request
        """
        with logfire.span("auth_service.fetch_profile", provider=provider.value):
            return await self.oauth_client.fetch_profile(
                provider, token_bundle.access_token
            )
