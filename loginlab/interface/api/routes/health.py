"""Health check routes."""

import time
from datetime import datetime, timezone

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request
from pydantic import BaseModel

from loginlab.config import Settings
from loginlab.domain.value import AuthProvider, ProviderRegistry

router = APIRouter(tags=["health"], route_class=DishkaRoute)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    uptime_seconds: float
    environment: str
    version: str
    git_sha: str
    providers: list[AuthProvider]


@router.get("/health", response_model=HealthResponse)
async def health_check(
    request: Request,
    settings: FromDishka[Settings],
    registry: FromDishka[ProviderRegistry],
) -> HealthResponse:
    """Basic health check endpoint.

    Returns:
        Health status indicating the service is running
    """
    started_at = getattr(request.app.state, "started_at", time.monotonic())
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        uptime_seconds=round(time.monotonic() - started_at, 3),
        environment=settings.environment,
        version=settings.version,
        git_sha=settings.git_sha,
        providers=registry.available(),
    )
