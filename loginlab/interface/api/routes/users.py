"""Identity listing and administration routes."""

from uuid import UUID

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter

from loginlab.application.usecase.identity import (
    DeactivateIdentityUseCase,
    GetIdentityStatsUseCase,
    GetIdentityUseCase,
    ListIdentitiesUseCase,
)
from loginlab.application.usecase.identity.deactivate_identity import (
    DeactivateIdentityRequest,
    DeactivateIdentityResponse,
)
from loginlab.application.usecase.identity.get_identity import GetIdentityRequest
from loginlab.application.usecase.identity.get_identity_stats import (
    IdentityStatsResponse,
)
from loginlab.application.usecase.identity.list_identities import (
    ListIdentitiesResponse,
)
from loginlab.domain.model import PublicIdentity
from loginlab.domain.value import IdentityId

router = APIRouter(prefix="/users", tags=["users"], route_class=DishkaRoute)


@router.get("", response_model=ListIdentitiesResponse)
async def list_users(
    use_case: FromDishka[ListIdentitiesUseCase],
) -> ListIdentitiesResponse:
    """List active identities, most recent login first."""
    return await use_case.execute()


@router.get("/stats", response_model=IdentityStatsResponse)
async def user_stats(
    use_case: FromDishka[GetIdentityStatsUseCase],
) -> IdentityStatsResponse:
    """Active identity totals, overall and per provider."""
    return await use_case.execute()


@router.get("/{identity_id}", response_model=PublicIdentity)
async def get_user(
    identity_id: UUID,
    use_case: FromDishka[GetIdentityUseCase],
) -> PublicIdentity:
    """Get one identity by ID (404 if unknown)."""
    return await use_case.execute(GetIdentityRequest(identity_id=IdentityId(identity_id)))


@router.patch("/{identity_id}/deactivate", response_model=DeactivateIdentityResponse)
async def deactivate_user(
    identity_id: UUID,
    use_case: FromDishka[DeactivateIdentityUseCase],
) -> DeactivateIdentityResponse:
    """Soft-delete an identity (404 if unknown)."""
    return await use_case.execute(
        DeactivateIdentityRequest(identity_id=IdentityId(identity_id))
    )
