"""Handle OAuth callback use case."""

import logfire
from pydantic import BaseModel, Field

from loginlab.application.usecase.base import BaseUseCase
from loginlab.domain.error import ProfileFetchError, TokenExchangeError
from loginlab.domain.model import PublicIdentity
from loginlab.domain.service import (
    AuthService,
    OAuthClientError,
    ReconciliationService,
)
from loginlab.domain.value import AuthProvider, ProfileData, TokenBundle

REDACTED = "[REDACTED]"


class HandleCallbackRequest(BaseModel):
    """Callback parameters as received from the provider redirect."""

    provider: AuthProvider | str
    code: str
    state: str | None = None


class TokenMetadata(BaseModel):
    """Displayable facts about an issued token bundle (no token values)."""

    token_type: str
    expires_in: int | None
    scope: str | None
    has_refresh_token: bool


class CallbackOutcome(BaseModel):
    """Result of a completed login."""

    provider: AuthProvider
    identity: PublicIdentity
    profile_data: ProfileData
    token_bundle: TokenBundle = Field(exclude=True, repr=False)

    @property
    def tokens(self) -> TokenMetadata:
        return TokenMetadata(
            token_type=self.token_bundle.token_type,
            expires_in=self.token_bundle.expires_in,
            scope=self.token_bundle.scope,
            has_refresh_token=self.token_bundle.has_refresh_token(),
        )


def redact_tokens(detail: str | None, token_bundle: TokenBundle) -> str | None:
    """Remove token values from upstream error text."""
    if not detail:
        return detail
    secrets = [token_bundle.access_token]
    if token_bundle.refresh_token:
        secrets.append(token_bundle.refresh_token)
    for secret in secrets:
        value = secret.get_secret_value()
        if value:
            detail = detail.replace(value, REDACTED)
    return detail


class HandleCallbackUseCase(BaseUseCase[HandleCallbackRequest, CallbackOutcome]):
    """Use case for turning a provider callback into a persisted identity."""

    def __init__(
        self,
        auth_service: AuthService,
        reconciliation_service: ReconciliationService,
    ) -> None:
        """Initialize handle callback use case.

        Args:
            auth_service: Authentication domain service (handles all providers)
            reconciliation_service: Identity reconciliation domain service
        """
        self.auth_service = auth_service
        self.reconciliation_service = reconciliation_service

    async def execute(self, request: HandleCallbackRequest) -> CallbackOutcome:
        """Execute the callback flow.

        Steps:
        1. Validate the provider against the configured registry
        2. Exchange the authorization code for tokens
        3. Fetch the provider profile with the access token
        4. Reconcile the login into one identity record

        No step is retried.

        Args:
            request: Callback parameters

        Returns:
            Outcome with the public identity, profile and token bundle

        Raises:
            UnsupportedProviderError: If provider not configured
            TokenExchangeError: If the code exchange fails
            ProfileFetchError: If the profile request fails
            MissingIdentityError: If the profile has no identifier
        """
        provider = self.auth_service.resolve_provider(request.provider)

        with logfire.span("handle_callback", provider=provider.value):
            try:
                token_bundle = await self.auth_service.exchange_code(
                    provider, request.code, request.state
                )
            except OAuthClientError as e:
                logfire.warn(
                    "Token exchange failed",
                    provider=provider.value,
                    upstream_status=e.status_code,
                )
                raise TokenExchangeError(provider.value, e.status_code, e.detail) from e

            try:
                profile_data = await self.auth_service.fetch_profile(
                    provider, token_bundle
                )
            except OAuthClientError as e:
                logfire.warn(
                    "Profile fetch failed",
                    provider=provider.value,
                    upstream_status=e.status_code,
                )
                raise ProfileFetchError(
                    provider.value,
                    e.status_code,
                    redact_tokens(e.detail, token_bundle),
                ) from e

            identity = await self.reconciliation_service.reconcile(
                provider, token_bundle, profile_data
            )

            return CallbackOutcome(
                provider=provider,
                identity=identity.to_public(),
                profile_data=profile_data,
                token_bundle=token_bundle,
            )
