"""FastAPI application factory."""

import time
from contextlib import asynccontextmanager

from dishka import AsyncContainer
from fastapi import FastAPI

from loginlab.config import Settings
from loginlab.interface.api.errors import register_exception_handlers
from loginlab.interface.api.middleware import install_middleware
from loginlab.interface.api.routes import auth, health, home, users
from loginlab.util.di.container import create_container, setup_di
from loginlab.util.logging import setup_logging
from loginlab.util.observability import instrument_fastapi, instrument_httpx


def create_app(
    settings: Settings | None = None, container: AsyncContainer | None = None
) -> FastAPI:
    """Create the LoginLab API application.

    Logfire must already be configured (``scripts/start_app.py`` does this).
    Instrumentation is skipped in the test environment.

    Args:
        settings: Settings override; loaded from the environment when omitted
        container: DI container override; built from ``settings`` when omitted
    """
    settings = settings or Settings()
    setup_logging(settings)
    container = container or create_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.started_at = time.monotonic()
        try:
            yield
        finally:
            # Disposes the engine and the shared OAuth client state
            await container.close()

    docs_url = None if settings.is_production else "/docs"
    app = FastAPI(
        title="LoginLab API",
        description="OAuth login harness that stores provider identities and tokens",
        version=settings.version,
        lifespan=lifespan,
        docs_url=docs_url,
        redoc_url=None,
    )
    # Also set here for clients that never run the lifespan
    app.state.started_at = time.monotonic()

    if settings.environment != "test":
        instrument_httpx()
        instrument_fastapi(app)

    register_exception_handlers(app, settings)
    install_middleware(app, settings)
    setup_di(app, container)

    app.include_router(home.router)
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(users.router)

    return app
