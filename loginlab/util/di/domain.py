"""Domain layer DI providers."""

from dishka import Scope, provide

from loginlab.config import AuthSettings
from loginlab.domain.repository import IdentityRepository
from loginlab.domain.service import (
    AuthService,
    IdentityService,
    OAuthClient,
    ReconciliationService,
)
from loginlab.domain.value import ProviderRegistry
from loginlab.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each HTTP request gets fresh service instances with their own transaction.
    """

    scope = Scope.REQUEST

    @provide
    def get_auth_service(
        self, oauth_client: OAuthClient, registry: ProviderRegistry
    ) -> AuthService:
        """Provide multi-provider authentication domain service."""
        return AuthService(oauth_client=oauth_client, registry=registry)

    @provide
    def get_reconciliation_service(
        self, identity_repository: IdentityRepository, auth_settings: AuthSettings
    ) -> ReconciliationService:
        """Provide identity reconciliation domain service."""
        return ReconciliationService(
            identity_repository=identity_repository,
            reactivate_deactivated=auth_settings.reactivate_deactivated,
        )

    @provide
    def get_identity_service(
        self, identity_repository: IdentityRepository
    ) -> IdentityService:
        """Provide identity listing domain service."""
        return IdentityService(identity_repository=identity_repository)
