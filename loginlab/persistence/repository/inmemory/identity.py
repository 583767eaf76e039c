"""In-memory identity repository for testing."""

from datetime import datetime, timezone
from typing import Optional

from loginlab.domain.error import NotFoundError
from loginlab.domain.model import IdentityPatch, IdentityRecord, PublicIdentity
from loginlab.domain.repository import (
    Duplicate,
    IdentityRepository,
    Inserted,
    InsertResult,
)
from loginlab.domain.value import AuthProvider, IdentityId


class InMemoryIdentityRepository(IdentityRepository):
    """In-memory implementation of IdentityRepository for testing.

    Methods never await between reading and writing ``_identities``, so each
    operation is atomic with respect to other coroutines on the loop.
    """

    def __init__(self) -> None:
        self._identities: list[IdentityRecord] = []

    def _index_of(self, identity_id: IdentityId) -> Optional[int]:
        for i, identity in enumerate(self._identities):
            if identity.id == identity_id:
                return i
        return None

    def _active(
        self, provider: AuthProvider, provider_user_id: str
    ) -> Optional[IdentityRecord]:
        for identity in self._identities:
            if (
                identity.is_active
                and identity.provider == provider
                and identity.provider_user_id == provider_user_id
            ):
                return identity
        return None

    async def find_active(
        self, provider: AuthProvider, provider_user_id: str
    ) -> Optional[IdentityRecord]:
        """Find the active identity for a provider pair."""
        return self._active(provider, provider_user_id)

    async def find_latest_inactive(
        self, provider: AuthProvider, provider_user_id: str
    ) -> Optional[IdentityRecord]:
        """Find the most recently deactivated identity for a provider pair."""
        matches = [
            identity
            for identity in self._identities
            if not identity.is_active
            and identity.provider == provider
            and identity.provider_user_id == provider_user_id
        ]
        if not matches:
            return None
        return max(matches, key=lambda i: i.updated_at)

    async def find_by_id(self, identity_id: IdentityId) -> Optional[PublicIdentity]:
        """Find identity by ID."""
        index = self._index_of(identity_id)
        if index is None:
            return None
        return self._identities[index].to_public()

    async def insert(self, record: IdentityRecord) -> InsertResult:
        """Insert unless an active identity already holds the pair."""
        if record.is_active and self._active(record.provider, record.provider_user_id):
            return Duplicate(
                provider=record.provider, provider_user_id=record.provider_user_id
            )
        self._identities.append(record)
        return Inserted(record=record)

    async def record_login(
        self, identity_id: IdentityId, patch: IdentityPatch, now: datetime
    ) -> Optional[IdentityRecord]:
        """Apply a login to an active identity."""
        index = self._index_of(identity_id)
        if index is None or not self._identities[index].is_active:
            return None
        updated = patch.apply_to(self._identities[index], now)
        self._identities[index] = updated
        return updated

    async def upsert(
        self,
        provider: AuthProvider,
        provider_user_id: str,
        patch: IdentityPatch,
        now: datetime,
    ) -> IdentityRecord:
        """Update the active identity for a pair, or insert one."""
        existing = self._active(provider, provider_user_id)
        if existing:
            updated = patch.apply_to(existing, now)
            self._identities[self._index_of(existing.id)] = updated
            return updated

        record = IdentityRecord.first_login(patch, now)
        self._identities.append(record)
        return record

    async def reactivate(
        self, identity_id: IdentityId, patch: IdentityPatch, now: datetime
    ) -> Optional[IdentityRecord]:
        """Reactivate a deactivated identity and apply a login to it."""
        index = self._index_of(identity_id)
        if index is None:
            return None
        identity = self._identities[index]
        if identity.is_active or self._active(
            identity.provider, identity.provider_user_id
        ):
            return None
        updated = patch.apply_to(identity, now, reactivate=True)
        self._identities[index] = updated
        return updated

    async def deactivate(self, identity_id: IdentityId) -> PublicIdentity:
        """Soft-delete an identity."""
        index = self._index_of(identity_id)
        if index is None:
            raise NotFoundError("Identity", str(identity_id))
        identity = self._identities[index]
        if not identity.is_active:
            return identity.to_public()
        updated = identity.model_copy(
            update={"is_active": False, "updated_at": datetime.now(timezone.utc)}
        )
        self._identities[index] = updated
        return updated.to_public()

    async def list_active(self) -> list[PublicIdentity]:
        """List active identities, most recent login first."""
        active = [i for i in self._identities if i.is_active]
        active.sort(key=lambda i: i.last_login_at, reverse=True)
        return [i.to_public() for i in active]

    async def count_by_provider(self) -> dict[AuthProvider, int]:
        """Count active identities per provider."""
        counts: dict[AuthProvider, int] = {}
        for identity in self._identities:
            if identity.is_active:
                counts[identity.provider] = counts.get(identity.provider, 0) + 1
        return dict(sorted(counts.items(), key=lambda item: item[1], reverse=True))

    async def count_active(self) -> int:
        """Count all active identities."""
        return sum(1 for i in self._identities if i.is_active)
