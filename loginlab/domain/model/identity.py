"""Identity record entity.

One record per (provider, provider user id) pair, holding the latest
profile fields and credential set from that provider.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from pydantic import Field, SecretStr

from loginlab.domain.model.common import DomainModel
from loginlab.domain.value import (
    AuthProvider,
    IdentityId,
    ProfileData,
    ProfileSummary,
    TokenBundle,
)
from loginlab.domain.value.common import ValueObject


class PublicIdentity(DomainModel):
    """Display view of an identity record.

    Has no token or raw payload fields at all, so nothing built from it can
    leak credentials into a listing or API response.
    """

    id: IdentityId
    provider: AuthProvider
    provider_user_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    token_type: str = "Bearer"
    expires_in: Optional[int] = None
    scope: Optional[str] = None
    login_count: int = Field(default=1, ge=1)
    last_login_at: datetime
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class IdentityRecord(DomainModel):
    """Internal full view of an identity record.

    Only reconciliation and persistence code handles this type. Sensitive
    fields are excluded from ``model_dump``; use ``to_public`` for display.
    """

    id: IdentityId
    provider: AuthProvider
    provider_user_id: str  # Opaque provider ID, compared as exact string
    email: Optional[str] = None
    display_name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    access_token: SecretStr = Field(exclude=True, repr=False)
    refresh_token: Optional[SecretStr] = Field(default=None, exclude=True, repr=False)
    token_type: str = "Bearer"
    expires_in: Optional[int] = None
    scope: Optional[str] = None
    raw_profile_data: dict[str, Any] = Field(
        default_factory=dict, exclude=True, repr=False
    )
    raw_token_bundle: dict[str, Any] = Field(
        default_factory=dict, exclude=True, repr=False
    )
    login_count: int = Field(default=1, ge=1)
    last_login_at: datetime
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    @classmethod
    def first_login(cls, patch: "IdentityPatch", now: datetime) -> "IdentityRecord":
        """Build the record for a never-seen provider identity."""
        return cls(
            id=IdentityId(uuid4()),
            provider=patch.provider,
            provider_user_id=patch.provider_user_id,
            email=patch.email,
            display_name=patch.display_name,
            username=patch.username,
            avatar_url=patch.avatar_url,
            access_token=patch.access_token,
            refresh_token=patch.refresh_token,
            token_type=patch.token_type,
            expires_in=patch.expires_in,
            scope=patch.scope,
            raw_profile_data=patch.raw_profile_data,
            raw_token_bundle=patch.raw_token_bundle,
            login_count=1,
            last_login_at=now,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    def to_public(self) -> PublicIdentity:
        """Project to the display view."""
        return PublicIdentity(**self.model_dump())


class IdentityPatch(ValueObject):
    """Overwrite set applied to an identity on each successful login.

    Token fields and raw payloads always replace the stored values. Profile
    fields replace stored values only when present in this login's payload.
    """

    provider: AuthProvider
    provider_user_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    access_token: SecretStr = Field(exclude=True, repr=False)
    refresh_token: Optional[SecretStr] = Field(default=None, exclude=True, repr=False)
    token_type: str = "Bearer"
    expires_in: Optional[int] = None
    scope: Optional[str] = None
    raw_profile_data: dict[str, Any] = Field(
        default_factory=dict, exclude=True, repr=False
    )
    raw_token_bundle: dict[str, Any] = Field(
        default_factory=dict, exclude=True, repr=False
    )

    @classmethod
    def from_login(
        cls,
        summary: ProfileSummary,
        token_bundle: TokenBundle,
        profile_data: ProfileData,
    ) -> "IdentityPatch":
        """Combine an extracted profile with the issued tokens."""
        return cls(
            provider=summary.provider,
            provider_user_id=summary.provider_user_id,
            email=summary.email,
            display_name=summary.display_name,
            username=summary.username,
            avatar_url=summary.avatar_url,
            access_token=token_bundle.access_token,
            refresh_token=token_bundle.refresh_token,
            token_type=token_bundle.token_type or "Bearer",
            expires_in=token_bundle.expires_in,
            scope=token_bundle.scope,
            raw_profile_data=dict(profile_data),
            raw_token_bundle=dict(token_bundle.raw),
        )

    def apply_to(
        self, record: IdentityRecord, now: datetime, reactivate: bool = False
    ) -> IdentityRecord:
        """Return ``record`` updated for one more successful login."""
        return record.model_copy(
            update={
                "email": self.email if self.email is not None else record.email,
                "display_name": (
                    self.display_name
                    if self.display_name is not None
                    else record.display_name
                ),
                "username": (
                    self.username if self.username is not None else record.username
                ),
                "avatar_url": (
                    self.avatar_url
                    if self.avatar_url is not None
                    else record.avatar_url
                ),
                "access_token": self.access_token,
                "refresh_token": self.refresh_token,
                "token_type": self.token_type,
                "expires_in": self.expires_in,
                "scope": self.scope,
                "raw_profile_data": self.raw_profile_data,
                "raw_token_bundle": self.raw_token_bundle,
                "login_count": record.login_count + 1,
                "last_login_at": max(record.last_login_at, now),
                "is_active": True if reactivate else record.is_active,
                "updated_at": now,
            }
        )
