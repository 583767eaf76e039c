"""Domain value objects for LoginLab.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and provider-specific normalisation.
"""

import html
from enum import Enum
from typing import Any

from pydantic import Field, SecretStr, field_validator

from loginlab.domain.error import MissingIdentityError, UnsupportedProviderError
from loginlab.domain.value.common import ValueObject

# Raw provider payloads are stored as-is
ProfileData = dict[str, Any]


class AuthProvider(str, Enum):
    """Supported authentication providers."""

    GOOGLE = "google"
    GITHUB = "github"
    REDDIT = "reddit"
    TWITTER = "twitter"
    INSTAGRAM = "instagram"


class TokenBundle(ValueObject):
    """Credential set returned by a provider's token endpoint.

    Token values are ``SecretStr`` so they are masked in repr and in
    ``model_dump(mode="json")``.
    """

    access_token: SecretStr
    refresh_token: SecretStr | None = None
    token_type: str = "Bearer"
    expires_in: int | None = None
    scope: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    @field_validator("scope", mode="before")
    @classmethod
    def join_scope_list(cls, v: Any) -> Any:
        """Some providers return scopes as a list."""
        if isinstance(v, (list, tuple)):
            return " ".join(str(s) for s in v)
        return v

    @classmethod
    def from_response(cls, payload: dict[str, Any]) -> "TokenBundle":
        """Build a bundle from a token endpoint JSON body.

        Accepts both snake_case (RFC 6749) and camelCase keys.

        Raises:
            ValueError: If the payload carries no access token
        """
        access_token = payload.get("access_token") or payload.get("accessToken")
        if not access_token:
            raise ValueError("Token response has no access token")

        expires_in = payload.get("expires_in", payload.get("expiresIn"))
        return cls(
            access_token=SecretStr(str(access_token)),
            refresh_token=_optional_secret(
                payload.get("refresh_token") or payload.get("refreshToken")
            ),
            token_type=payload.get("token_type")
            or payload.get("tokenType")
            or "Bearer",
            expires_in=int(expires_in) if expires_in not in (None, "") else None,
            scope=payload.get("scope"),
            raw=dict(payload),
        )

    def has_refresh_token(self) -> bool:
        """Whether the provider issued a refresh token."""
        return self.refresh_token is not None


def _optional_secret(value: Any) -> SecretStr | None:
    if value in (None, ""):
        return None
    return SecretStr(str(value))


class ProfileFieldMap(ValueObject):
    """Where a provider keeps each profile field, in priority order."""

    id_keys: tuple[str, ...] = ("id", "login")
    username_keys: tuple[str, ...] = ("login", "username")
    display_name_keys: tuple[str, ...] = ("name",)
    avatar_keys: tuple[str, ...] = ("avatar_url", "picture")
    email_keys: tuple[str, ...] = ("email",)


PROFILE_FIELDS: dict[AuthProvider, ProfileFieldMap] = {
    AuthProvider.GOOGLE: ProfileFieldMap(id_keys=("id", "sub", "login")),
    AuthProvider.GITHUB: ProfileFieldMap(),
    # Reddit's "name" is the account handle, not a display name
    AuthProvider.REDDIT: ProfileFieldMap(
        id_keys=("id", "name"),
        username_keys=("name",),
        display_name_keys=(),
        avatar_keys=("icon_img", "snoovatar_img"),
    ),
    AuthProvider.TWITTER: ProfileFieldMap(
        id_keys=("id", "username"),
        avatar_keys=("profile_image_url",),
    ),
    AuthProvider.INSTAGRAM: ProfileFieldMap(
        id_keys=("id", "username"),
        avatar_keys=("profile_picture_url",),
    ),
}


class ProfileSummary(ValueObject):
    """Normalised identity fields extracted from a provider profile."""

    provider: AuthProvider
    provider_user_id: str
    email: str | None = None
    display_name: str | None = None
    username: str | None = None
    avatar_url: str | None = None

    @field_validator("email", mode="before")
    @classmethod
    def normalise_email(cls, v: Any) -> Any:
        """Emails are stored trimmed and lower-cased."""
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    @field_validator("display_name", "username", mode="before")
    @classmethod
    def trim_names(cls, v: Any) -> Any:
        """Names are stored trimmed."""
        if isinstance(v, str):
            return v.strip() or None
        return v

    def label(self) -> str:
        """Human-readable name for log lines."""
        return self.display_name or self.username or self.provider_user_id


def _first_present(data: ProfileData, keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def extract_profile(provider: AuthProvider, data: ProfileData) -> ProfileSummary:
    """Extract the identity fields from a provider-shaped profile payload.

    The provider user ID is the primary ``id`` field, falling back to the
    provider's login/username field, always coerced to ``str``.

    Raises:
        MissingIdentityError: If no identifier field is present
    """
    fields = PROFILE_FIELDS[provider]
    provider_user_id = _first_present(data, fields.id_keys)
    if provider_user_id is None:
        raise MissingIdentityError(provider.value, list(fields.id_keys))

    avatar = _as_text(_first_present(data, fields.avatar_keys))
    if avatar and provider == AuthProvider.REDDIT:
        # Reddit HTML-escapes the query string of icon URLs
        avatar = html.unescape(avatar)

    return ProfileSummary(
        provider=provider,
        provider_user_id=str(provider_user_id),
        email=_as_text(_first_present(data, fields.email_keys)),
        display_name=_as_text(_first_present(data, fields.display_name_keys)),
        username=_as_text(_first_present(data, fields.username_keys)),
        avatar_url=avatar,
    )


class ProviderCredentials(ValueObject):
    """OAuth client registration for one provider."""

    provider: AuthProvider
    client_id: str
    client_secret: SecretStr
    redirect_uri: str


class ProviderRegistry(ValueObject):
    """Immutable set of configured OAuth providers.

    Built once from settings and handed to services through DI.
    """

    credentials: tuple[ProviderCredentials, ...] = ()

    def available(self) -> list[AuthProvider]:
        """Configured providers, in declaration order."""
        return [c.provider for c in self.credentials]

    def is_available(self, provider: AuthProvider | str) -> bool:
        """Whether the provider is configured."""
        wanted = _provider_value(provider)
        return any(c.provider.value == wanted for c in self.credentials)

    def get(self, provider: AuthProvider | str) -> ProviderCredentials:
        """Get credentials for a provider.

        Raises:
            UnsupportedProviderError: If the provider is unknown or not configured
        """
        wanted = _provider_value(provider)
        for creds in self.credentials:
            if creds.provider.value == wanted:
                return creds
        raise UnsupportedProviderError(wanted, [p.value for p in self.available()])

    def resolve(self, provider: AuthProvider | str) -> AuthProvider:
        """Validate a provider name against the configured set."""
        return self.get(provider).provider


def _provider_value(provider: AuthProvider | str) -> str:
    if isinstance(provider, AuthProvider):
        return provider.value
    return str(provider).strip().lower()
