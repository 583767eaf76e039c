"""Get identity stats use case."""

from datetime import datetime, timezone

from pydantic import BaseModel

from loginlab.domain.service import IdentityService, ProviderCount


class IdentityStatsResponse(BaseModel):
    """Totals over active identities."""

    total_users: int
    provider_stats: list[ProviderCount]
    timestamp: datetime


class GetIdentityStatsUseCase:
    """Use case for aggregate identity statistics."""

    def __init__(self, identity_service: IdentityService) -> None:
        self.identity_service = identity_service

    async def execute(self) -> IdentityStatsResponse:
        total = await self.identity_service.count_active()
        provider_stats = await self.identity_service.provider_stats()
        return IdentityStatsResponse(
            total_users=total,
            provider_stats=provider_stats,
            timestamp=datetime.now(timezone.utc),
        )
