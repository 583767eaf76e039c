"""Mock persistence providers for testing."""

from dishka import Scope, provide

from loginlab.domain.repository import IdentityRepository
from loginlab.persistence.repository.inmemory import InMemoryIdentityRepository
from loginlab.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using in-memory repositories.

    APP scope: each test builds its own container, and data must survive
    across the requests of one API test.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_identity_repository(self) -> IdentityRepository:
        """Provide in-memory Identity repository."""
        return InMemoryIdentityRepository()
