"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class UnsupportedProviderError(DomainError):
    """Raised for an unknown or unconfigured OAuth provider."""

    def __init__(self, provider: str, available: list[str] | None = None):
        self.provider = provider
        self.available = available or []
        super().__init__(f"OAuth provider '{provider}' is not configured")


class MissingIdentityError(DomainError):
    """Raised when a provider profile carries no usable identifier."""

    def __init__(self, provider: str, keys: list[str] | None = None):
        self.provider = provider
        self.keys = keys or []
        super().__init__(
            f"{provider} profile has no identifier (looked for: {', '.join(self.keys)})"
        )


class DuplicateKeyError(DomainError):
    """Raised when an active identity already exists for a provider pair."""

    def __init__(self, provider: str, provider_user_id: str):
        self.provider = provider
        self.provider_user_id = provider_user_id
        super().__init__(
            f"Active identity already exists for {provider}:{provider_user_id}"
        )


class UpstreamProviderError(DomainError):
    """Base error for a failed call to an OAuth provider.

    Carries the upstream HTTP status and response detail when available.
    Token values must never be put into ``detail``.
    """

    category = "upstream_error"
    stage = "upstream call"

    def __init__(
        self,
        provider: str,
        upstream_status: int | None = None,
        detail: str | None = None,
    ):
        self.provider = provider
        self.upstream_status = upstream_status
        self.detail = detail
        message = f"{provider} {self.stage} failed"
        if upstream_status is not None:
            message += f" (Status: {upstream_status})"
        super().__init__(message)


class TokenExchangeError(UpstreamProviderError):
    """Authorization code could not be exchanged for tokens."""

    category = "token_exchange_failed"
    stage = "token exchange"


class ProfileFetchError(UpstreamProviderError):
    """Profile could not be fetched with the issued access token."""

    category = "profile_fetch_failed"
    stage = "profile fetch"
