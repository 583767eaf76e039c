"""List identities use case."""

from pydantic import BaseModel

from loginlab.domain.model import PublicIdentity
from loginlab.domain.service import IdentityService, ProviderCount


class ListIdentitiesResponse(BaseModel):
    """Active identities with per-provider counts."""

    users: list[PublicIdentity]
    count: int
    provider_stats: list[ProviderCount]


class ListIdentitiesUseCase:
    """Use case for listing active identities, most recent login first."""

    def __init__(self, identity_service: IdentityService) -> None:
        """Initialize list identities use case.

        Args:
            identity_service: Identity domain service
        """
        self.identity_service = identity_service

    async def execute(self) -> ListIdentitiesResponse:
        users = await self.identity_service.list_active()
        provider_stats = await self.identity_service.provider_stats()
        return ListIdentitiesResponse(
            users=users, count=len(users), provider_stats=provider_stats
        )
