"""Identity listing and administration domain service."""

import logfire

from loginlab.domain.error import NotFoundError
from loginlab.domain.model.identity import PublicIdentity
from loginlab.domain.repository import IdentityRepository
from loginlab.domain.value import AuthProvider, IdentityId
from loginlab.domain.value.common import ValueObject

from .base import Service


class ProviderCount(ValueObject):
    """Number of active identities for one provider."""

    provider: AuthProvider
    count: int


class IdentityService(Service):
    """Domain service for reading and deactivating identities.

    Works only with the public identity view.
    """

    def __init__(self, identity_repository: IdentityRepository) -> None:
        """Initialize identity service.

        Args:
            identity_repository: Identity repository
        """
        self.identity_repository = identity_repository

    async def list_active(self) -> list[PublicIdentity]:
        """Active identities, most recent login first."""
        with logfire.span("identity_service.list_active"):
            identities = await self.identity_repository.list_active()
            logfire.info("Active identities listed", count=len(identities))
            return identities

    async def get_by_id(self, identity_id: IdentityId) -> PublicIdentity:
        """Get identity by ID.

        Args:
            identity_id: Identity ID

        Returns:
            The identity

        Raises:
            NotFoundError: If identity not found
        """
        with logfire.span("identity_service.get_by_id", identity_id=str(identity_id)):
            identity = await self.identity_repository.find_by_id(identity_id)
            if not identity:
                logfire.warn("Identity not found", identity_id=str(identity_id))
                raise NotFoundError("Identity", str(identity_id))
            return identity

    async def deactivate(self, identity_id: IdentityId) -> PublicIdentity:
        """Soft-delete an identity.

        Raises:
            NotFoundError: If identity not found
        """
        with logfire.span("identity_service.deactivate", identity_id=str(identity_id)):
            identity = await self.identity_repository.deactivate(identity_id)
            logfire.info(
                "Identity deactivated",
                identity_id=str(identity_id),
                provider=identity.provider.value,
            )
            return identity

    async def provider_stats(self) -> list[ProviderCount]:
        """Active identity counts per provider, largest first."""
        counts = await self.identity_repository.count_by_provider()
        return [
            ProviderCount(provider=provider, count=count)
            for provider, count in sorted(
                counts.items(), key=lambda item: (-item[1], item[0].value)
            )
        ]

    async def count_active(self) -> int:
        """Total active identities."""
        return await self.identity_repository.count_active()
