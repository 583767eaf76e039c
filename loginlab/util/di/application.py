"""Application layer DI providers."""

from dishka import Scope, provide

from loginlab.application.usecase.auth import HandleCallbackUseCase
from loginlab.application.usecase.identity import (
    DeactivateIdentityUseCase,
    GetIdentityStatsUseCase,
    GetIdentityUseCase,
    ListIdentitiesUseCase,
)
from loginlab.domain.service import (
    AuthService,
    IdentityService,
    ReconciliationService,
)
from loginlab.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Auth use cases
    @provide(scope=Scope.REQUEST)
    def get_handle_callback_use_case(
        self,
        auth_service: AuthService,
        reconciliation_service: ReconciliationService,
    ) -> HandleCallbackUseCase:
        """Provide handle callback use case."""
        return HandleCallbackUseCase(
            auth_service=auth_service,
            reconciliation_service=reconciliation_service,
        )

    # Identity use cases
    @provide(scope=Scope.REQUEST)
    def get_list_identities_use_case(
        self, identity_service: IdentityService
    ) -> ListIdentitiesUseCase:
        """Provide list identities use case."""
        return ListIdentitiesUseCase(identity_service=identity_service)

    @provide(scope=Scope.REQUEST)
    def get_get_identity_use_case(
        self, identity_service: IdentityService
    ) -> GetIdentityUseCase:
        """Provide get identity use case."""
        return GetIdentityUseCase(identity_service=identity_service)

    @provide(scope=Scope.REQUEST)
    def get_get_identity_stats_use_case(
        self, identity_service: IdentityService
    ) -> GetIdentityStatsUseCase:
        """Provide identity stats use case."""
        return GetIdentityStatsUseCase(identity_service=identity_service)

    @provide(scope=Scope.REQUEST)
    def get_deactivate_identity_use_case(
        self, identity_service: IdentityService
    ) -> DeactivateIdentityUseCase:
        """Provide deactivate identity use case."""
        return DeactivateIdentityUseCase(identity_service=identity_service)
