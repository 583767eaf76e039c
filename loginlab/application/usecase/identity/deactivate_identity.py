"""Deactivate identity use case."""

from pydantic import BaseModel

from loginlab.application.usecase.base import BaseUseCase
from loginlab.domain.model import PublicIdentity
from loginlab.domain.service import IdentityService
from loginlab.domain.value import IdentityId


class DeactivateIdentityRequest(BaseModel):
    """Deactivate identity request."""

    identity_id: IdentityId


class DeactivateIdentityResponse(BaseModel):
    """Deactivate identity response."""

    message: str
    user: PublicIdentity


class DeactivateIdentityUseCase(
    BaseUseCase[DeactivateIdentityRequest, DeactivateIdentityResponse]
):
    """Use case for soft-deleting an identity.

    The record is kept with ``is_active = False``; it no longer appears in
    listings or counts and no longer blocks a new login for the same
    provider identity.
    """

    def __init__(self, identity_service: IdentityService) -> None:
        """Initialize deactivate identity use case.

        Args:
            identity_service: Identity domain service
        """
        self.identity_service = identity_service

    async def execute(
        self, request: DeactivateIdentityRequest
    ) -> DeactivateIdentityResponse:
        """Execute deactivate flow.

        Raises:
            NotFoundError: If identity not found
        """
        identity = await self.identity_service.deactivate(request.identity_id)
        return DeactivateIdentityResponse(
            message="User deactivated successfully", user=identity
        )
