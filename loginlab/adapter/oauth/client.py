"""OAuth 2.0 client implementation for all supported providers.

Implements the authorization code flow over httpx, with PKCE where the
provider requires it.
"""

import hashlib
import secrets
import time
from base64 import urlsafe_b64encode
from typing import Any, Callable
from urllib.parse import urlencode

import httpx
import logfire
from pydantic import SecretStr

from loginlab.adapter.error import OAuthAdapterError
from loginlab.domain.service.auth_service import OAuthClient
from loginlab.domain.value import (
    AuthProvider,
    ProfileData,
    ProviderCredentials,
    TokenBundle,
)

from .providers import PROVIDER_ENDPOINTS, ProviderEndpoints

# Abandoned logins give up their PKCE verifier after this many seconds
PKCE_VERIFIER_TTL = 10 * 60


class HttpxOAuthClient(OAuthClient):
    """OAuth 2.0 client driven by the provider endpoint table."""

    def __init__(
        self,
        user_agent: str,
        endpoints: dict[AuthProvider, ProviderEndpoints] | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize OAuth client.

        Args:
            user_agent: User-Agent sent on every request (Reddit rejects
                generic agents)
            endpoints: Provider endpoint table override
            timeout: Per-request timeout in seconds
            transport: httpx transport override
            clock: Monotonic clock for PKCE verifier expiry
        """
        self.user_agent = user_agent
        self.endpoints = endpoints or PROVIDER_ENDPOINTS
        self.timeout = timeout
        self.transport = transport
        self.clock = clock

        # PKCE verifiers per state, in issue order; single-process only
        self._pkce_verifiers: dict[str, str] = {}
        self._pkce_issued_at: dict[str, float] = {}

    def _store_verifier(self, state: str, verifier: str) -> None:
        now = self.clock()
        for pending, issued_at in list(self._pkce_issued_at.items()):
            if now - issued_at < PKCE_VERIFIER_TTL:
                break
            del self._pkce_issued_at[pending]
            del self._pkce_verifiers[pending]
        self._pkce_verifiers.pop(state, None)
        self._pkce_issued_at.pop(state, None)
        self._pkce_verifiers[state] = verifier
        self._pkce_issued_at[state] = now

    def _take_verifier(self, state: str | None) -> str | None:
        if not state or state not in self._pkce_verifiers:
            return None
        verifier = self._pkce_verifiers.pop(state)
        issued_at = self._pkce_issued_at.pop(state)
        if self.clock() - issued_at >= PKCE_VERIFIER_TTL:
            return None
        return verifier

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self.transport,
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
        )

    def _generate_pkce_pair(self) -> tuple[str, str]:
        """Generate PKCE code verifier and challenge.

        Returns:
            Tuple of (verifier, challenge)
        """
        code_verifier = urlsafe_b64encode(secrets.token_bytes(32)).decode("utf-8")
        code_verifier = code_verifier.rstrip("=")

        challenge_bytes = hashlib.sha256(code_verifier.encode("utf-8")).digest()
        code_challenge = urlsafe_b64encode(challenge_bytes).decode("utf-8")
        code_challenge = code_challenge.rstrip("=")

        return code_verifier, code_challenge

    async def authorization_url(
        self, credentials: ProviderCredentials, state: str
    ) -> str:
        endpoints = self.endpoints[credentials.provider]
        params = {
            "response_type": "code",
            "client_id": credentials.client_id,
            "redirect_uri": credentials.redirect_uri,
            "scope": endpoints.scope_separator.join(endpoints.scopes),
            "state": state,
            **endpoints.authorize_params,
        }

        if endpoints.pkce:
            code_verifier, code_challenge = self._generate_pkce_pair()
            self._store_verifier(state, code_verifier)
            params["code_challenge"] = code_challenge
            params["code_challenge_method"] = "S256"

        return f"{endpoints.authorize_url}?{urlencode(params)}"

    async def exchange_code(
        self, credentials: ProviderCredentials, code: str, state: str | None = None
    ) -> TokenBundle:
        provider = credentials.provider
        endpoints = self.endpoints[provider]
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": credentials.redirect_uri,
            "client_id": credentials.client_id,
        }
        auth = None
        if endpoints.basic_auth:
            auth = (credentials.client_id, credentials.client_secret.get_secret_value())
        else:
            data["client_secret"] = credentials.client_secret.get_secret_value()

        if endpoints.pkce:
            code_verifier = self._take_verifier(state)
            if not code_verifier:
                raise OAuthAdapterError(
                    f"{provider.value} token exchange failed: unknown state",
                    detail="Invalid state or PKCE verifier not found",
                )
            data["code_verifier"] = code_verifier

        try:
            async with self._client() as client:
                response = await client.post(endpoints.token_url, data=data, auth=auth)
        except httpx.HTTPError as e:
            logfire.error(
                "OAuth token exchange HTTP error", provider=provider.value, error=str(e)
            )
            raise OAuthAdapterError(
                f"HTTP error during token exchange: {e}", detail=str(e)
            ) from e

        if not response.is_success:
            logfire.error(
                "OAuth token exchange failed",
                provider=provider.value,
                status_code=response.status_code,
                error=response.text,
            )
            raise OAuthAdapterError(
                f"Token exchange failed: {response.status_code}",
                status_code=response.status_code,
                detail=response.text,
            )

        payload = _json_body(response)
        try:
            # GitHub reports bad codes as 200 with an "error" body
            return TokenBundle.from_response(payload)
        except ValueError as e:
            detail = payload.get("error_description") or payload.get("error") or str(e)
            logfire.error(
                "OAuth token response rejected", provider=provider.value, error=detail
            )
            raise OAuthAdapterError(
                "Token response has no access token",
                status_code=response.status_code,
                detail=str(detail),
            ) from e

    async def fetch_profile(
        self, provider: AuthProvider, access_token: SecretStr
    ) -> ProfileData:
        endpoints = self.endpoints[provider]
        params = dict(endpoints.userinfo_params)
        headers = {}
        if endpoints.token_in_query:
            params["access_token"] = access_token.get_secret_value()
        else:
            headers["Authorization"] = f"Bearer {access_token.get_secret_value()}"

        try:
            async with self._client() as client:
                response = await client.get(
                    endpoints.userinfo_url, params=params, headers=headers
                )
        except httpx.HTTPError as e:
            logfire.error(
                "OAuth profile request HTTP error", provider=provider.value, error=str(e)
            )
            raise OAuthAdapterError(
                f"HTTP error fetching profile: {e}", detail=str(e)
            ) from e

        if not response.is_success:
            logfire.error(
                "OAuth profile request failed",
                provider=provider.value,
                status_code=response.status_code,
                error=response.text,
            )
            raise OAuthAdapterError(
                f"Profile request failed: {response.status_code}",
                status_code=response.status_code,
                detail=response.text,
            )

        payload = _json_body(response)
        if endpoints.userinfo_envelope:
            payload = payload.get(endpoints.userinfo_envelope) or {}
        return payload


def _json_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError as e:
        raise OAuthAdapterError(
            "Provider returned a non-JSON body",
            status_code=response.status_code,
            detail=response.text[:500],
        ) from e
    if not isinstance(body, dict):
        raise OAuthAdapterError(
            "Provider returned an unexpected JSON body",
            status_code=response.status_code,
        )
    return body


MOCK_PROFILES: dict[AuthProvider, ProfileData] = {
    AuthProvider.GOOGLE: {
        "id": "108234567890",
        "email": "Mock.User@Example.com",
        "verified_email": True,
        "name": "Mock Google User",
        "picture": "https://example.com/google-avatar.png",
    },
    AuthProvider.GITHUB: {
        "id": 1001,
        "login": "mockuser",
        "name": "Mock GitHub User",
        "email": "mock@github.example",
        "avatar_url": "https://example.com/github-avatar.png",
    },
    AuthProvider.REDDIT: {
        "id": "t2mock",
        "name": "mock_redditor",
        "icon_img": "https://styles.redditmedia.com/mock.png?width=256&amp;s=abc",
    },
    AuthProvider.TWITTER: {
        "id": "2001",
        "username": "mocktweeter",
        "name": "Mock Twitter User",
        "profile_image_url": "https://example.com/twitter-avatar.png",
    },
    AuthProvider.INSTAGRAM: {
        "id": "3001",
        "username": "mockgram",
    },
}


class MockOAuthClient(OAuthClient):
    """Mock OAuth client for testing.

    Returns deterministic test data without making real API calls.
    """

    def __init__(self, profiles: dict[AuthProvider, ProfileData] | None = None):
        """Initialize mock client.

        Args:
            profiles: Profile payload override per provider
        """
        self.profiles = {**MOCK_PROFILES, **(profiles or {})}

    async def authorization_url(
        self, credentials: ProviderCredentials, state: str
    ) -> str:
        endpoints = PROVIDER_ENDPOINTS[credentials.provider]
        params = {"client_id": credentials.client_id, "state": state, "mock": "true"}
        return f"{endpoints.authorize_url}?{urlencode(params)}"

    async def exchange_code(
        self, credentials: ProviderCredentials, code: str, state: str | None = None
    ) -> TokenBundle:
        provider = credentials.provider.value
        return TokenBundle.from_response(
            {
                "access_token": f"mock-{provider}-access-{code}",
                "refresh_token": f"mock-{provider}-refresh-{code}",
                "token_type": "bearer",
                "expires_in": 3600,
                "scope": " ".join(PROVIDER_ENDPOINTS[credentials.provider].scopes),
            }
        )

    async def fetch_profile(
        self, provider: AuthProvider, access_token: SecretStr
    ) -> ProfileData:
        return dict(self.profiles[provider])
