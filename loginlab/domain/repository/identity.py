"""Identity repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Literal, Optional, Union

from loginlab.domain.error import DuplicateKeyError
from loginlab.domain.model.common import DomainModel
from loginlab.domain.model.identity import IdentityPatch, IdentityRecord, PublicIdentity
from loginlab.domain.value import AuthProvider, IdentityId


class Inserted(DomainModel):
    """Insert succeeded; ``record`` is the stored row."""

    kind: Literal["inserted"] = "inserted"
    record: IdentityRecord

    def unwrap(self) -> IdentityRecord:
        return self.record


class Duplicate(DomainModel):
    """Insert was refused because an active record already holds the pair."""

    kind: Literal["duplicate"] = "duplicate"
    provider: AuthProvider
    provider_user_id: str

    def unwrap(self) -> IdentityRecord:
        """Raise the duplicate as an error for callers that can't recover."""
        raise DuplicateKeyError(self.provider.value, self.provider_user_id)


InsertResult = Union[Inserted, Duplicate]


class IdentityRepository(ABC):
    """Repository for identity records.

    Owns the uniqueness rule: at most one active record per
    (provider, provider_user_id), enforced by storage rather than by
    read-then-write checks.
    """

    @abstractmethod
    async def find_active(
        self, provider: AuthProvider, provider_user_id: str
    ) -> Optional[IdentityRecord]:
        """Find the active identity for a provider pair.

        Args:
            provider: The authentication provider
            provider_user_id: The user's ID on that provider

        Returns:
            The active identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_latest_inactive(
        self, provider: AuthProvider, provider_user_id: str
    ) -> Optional[IdentityRecord]:
        """Find the most recently deactivated identity for a provider pair."""
        pass

    @abstractmethod
    async def find_by_id(self, identity_id: IdentityId) -> Optional[PublicIdentity]:
        """Find an identity by ID, active or not.

        Args:
            identity_id: The identity's unique identifier

        Returns:
            Display view of the identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def insert(self, record: IdentityRecord) -> InsertResult:
        """Insert a new identity unless the pair is already taken.

        Args:
            record: Fully built record for a first login

        Returns:
            ``Inserted`` with the stored record, or ``Duplicate`` when an
            active record already exists for the pair
        """
        pass

    @abstractmethod
    async def record_login(
        self, identity_id: IdentityId, patch: IdentityPatch, now: datetime
    ) -> Optional[IdentityRecord]:
        """Atomically apply a login to an active identity.

        Overwrites tokens and raw payloads, overwrites profile fields present
        in ``patch``, increments ``login_count`` and moves ``last_login_at``
        forward to ``now`` (never backward).

        Returns:
            The updated record, or None if the identity is no longer active
        """
        pass

    @abstractmethod
    async def upsert(
        self,
        provider: AuthProvider,
        provider_user_id: str,
        patch: IdentityPatch,
        now: datetime,
    ) -> IdentityRecord:
        """Atomically update the active identity for a pair, or insert one.

        The update branch behaves like ``record_login``; the insert branch
        creates a record with ``login_count = 1``.

        Returns:
            The resulting record
        """
        pass

    @abstractmethod
    async def reactivate(
        self, identity_id: IdentityId, patch: IdentityPatch, now: datetime
    ) -> Optional[IdentityRecord]:
        """Reactivate a deactivated identity and apply a login to it.

        Returns:
            The updated record, or None if it is missing, already active, or
            another active record now holds the pair
        """
        pass

    @abstractmethod
    async def deactivate(self, identity_id: IdentityId) -> PublicIdentity:
        """Soft-delete an identity.

        Args:
            identity_id: The identity to deactivate

        Returns:
            Display view of the deactivated identity

        Raises:
            NotFoundError: If no identity has this ID
        """
        pass

    @abstractmethod
    async def list_active(self) -> list[PublicIdentity]:
        """List active identities, most recent login first."""
        pass

    @abstractmethod
    async def count_by_provider(self) -> dict[AuthProvider, int]:
        """Count active identities per provider, largest count first."""
        pass

    @abstractmethod
    async def count_active(self) -> int:
        """Count all active identities."""
        pass
