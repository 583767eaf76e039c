"""Get identity use case."""

from pydantic import BaseModel

from loginlab.application.usecase.base import BaseUseCase
from loginlab.domain.model import PublicIdentity
from loginlab.domain.service import IdentityService
from loginlab.domain.value import IdentityId


class GetIdentityRequest(BaseModel):
    """Get identity request."""

    identity_id: IdentityId


class GetIdentityUseCase(BaseUseCase[GetIdentityRequest, PublicIdentity]):
    """Use case for reading one identity, active or not."""

    def __init__(self, identity_service: IdentityService) -> None:
        """Initialize get identity use case.

        Args:
            identity_service: Identity domain service
        """
        self.identity_service = identity_service

    async def execute(self, request: GetIdentityRequest) -> PublicIdentity:
        """Execute get identity flow.

        Raises:
            NotFoundError: If identity not found
        """
        return await self.identity_service.get_by_id(request.identity_id)
