"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from datetime import datetime, timezone
from typing import Any, Dict
from uuid import UUID

from pydantic import SecretStr

from loginlab.domain.model import IdentityRecord, PublicIdentity
from loginlab.domain.value import AuthProvider, IdentityId

PUBLIC_COLUMNS = tuple(PublicIdentity.model_fields)


def _aware(value: datetime) -> datetime:
    """SQLite drops tzinfo; all stored timestamps are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _identity_id(value: Any) -> IdentityId:
    return IdentityId(UUID(value) if isinstance(value, str) else value)


def _public_fields(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": _identity_id(row["id"]),
        "provider": AuthProvider(row["provider"]),
        "provider_user_id": row["provider_user_id"],
        "email": row.get("email"),
        "display_name": row.get("display_name"),
        "username": row.get("username"),
        "avatar_url": row.get("avatar_url"),
        "token_type": row.get("token_type") or "Bearer",
        "expires_in": row.get("expires_in"),
        "scope": row.get("scope"),
        "login_count": row["login_count"],
        "last_login_at": _aware(row["last_login_at"]),
        "is_active": bool(row["is_active"]),
        "created_at": _aware(row["created_at"]),
        "updated_at": _aware(row["updated_at"]),
    }


def row_to_public_identity(row: Dict[str, Any]) -> PublicIdentity:
    """Convert database row to PublicIdentity domain model.

    Args:
        row: Database row as dict (token columns may be absent)

    Returns:
        PublicIdentity domain model
    """
    return PublicIdentity(**_public_fields(row))


def row_to_identity_record(row: Dict[str, Any]) -> IdentityRecord:
    """Convert database row to IdentityRecord domain model.

    Args:
        row: Full database row as dict

    Returns:
        IdentityRecord domain model
    """
    refresh_token = row.get("refresh_token")
    return IdentityRecord(
        **_public_fields(row),
        access_token=SecretStr(row["access_token"]),
        refresh_token=SecretStr(refresh_token) if refresh_token else None,
        raw_profile_data=row.get("raw_profile_data") or {},
        raw_token_bundle=row.get("raw_token_bundle") or {},
    )


def identity_record_to_dict(record: IdentityRecord) -> Dict[str, Any]:
    """Convert IdentityRecord domain model to database dict.

    ``model_dump`` excludes the sensitive fields, so they are added back
    explicitly here.

    Args:
        record: IdentityRecord domain model

    Returns:
        Dict suitable for database insertion
    """
    values = record.model_dump()
    values["provider"] = record.provider.value
    values["access_token"] = record.access_token.get_secret_value()
    values["refresh_token"] = (
        record.refresh_token.get_secret_value() if record.refresh_token else None
    )
    values["raw_profile_data"] = record.raw_profile_data
    values["raw_token_bundle"] = record.raw_token_bundle
    return values
