"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

import logfire
from dishka import Scope, provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from loginlab.config import Settings
from loginlab.domain.repository import IdentityRepository
from loginlab.persistence.database import create_engine, create_session_factory
from loginlab.persistence.repository import PostgresIdentityRepository
from loginlab.util.di.base import ProviderBase
from loginlab.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """SQL identity store (PostgreSQL in deployment, SQLite in tests)."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    async def engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        """One engine per process, disposed when the container closes."""
        engine = create_engine(settings)
        if settings.environment != "test":
            instrument_sqlalchemy(engine)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def session_factory(self, engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
        return create_session_factory(engine)

    @provide(scope=Scope.REQUEST)
    async def session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterator[AsyncSession]:
        """One transaction per request.

        Committed when the request scope closes cleanly, rolled back when
        the handler raised.
        """
        async with session_factory() as session:
            try:
                yield session
            except Exception as e:
                logfire.warn(
                    "Identity store transaction rolled back",
                    error_type=type(e).__name__,
                )
                await session.rollback()
                raise
            await session.commit()

    @provide(scope=Scope.REQUEST)
    def identity_repository(self, session: AsyncSession) -> IdentityRepository:
        return PostgresIdentityRepository(session)
