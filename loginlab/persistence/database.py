"""Engine and session factory for the identity store.

PostgreSQL (asyncpg) in deployment; the test suite points DATABASE__URL at
a SQLite file through aiosqlite.
"""

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from loginlab.config import Settings
from loginlab.util.error import ConfigurationError

ASYNC_DRIVERS = {"postgresql+asyncpg", "sqlite+aiosqlite"}


def create_engine(settings: Settings) -> AsyncEngine:
    """Build the async engine for ``settings.database.url``.

    SQL echo follows ``settings.debug``. Bound parameters carry token values,
    so they are left out of echoed statements and of DBAPI error messages.

    Raises:
        ConfigurationError: If the URL does not name an async driver
    """
    url = settings.database.url
    drivername = make_url(url).drivername
    if drivername not in ASYNC_DRIVERS:
        raise ConfigurationError(
            f"DATABASE__URL uses {drivername!r}; expected one of {sorted(ASYNC_DRIVERS)}"
        )

    if drivername.startswith("sqlite"):
        # SQLite pools don't take sizing arguments
        return create_async_engine(url, echo=settings.debug, hide_parameters=True)

    return create_async_engine(
        url,
        echo=settings.debug,
        hide_parameters=True,
        pool_pre_ping=True,
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Committed rows stay readable after the request transaction ends
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
