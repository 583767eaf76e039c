"""Service index route."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from pydantic import BaseModel

from loginlab.config import Settings
from loginlab.domain.value import AuthProvider, ProviderRegistry

router = APIRouter(tags=["home"], route_class=DishkaRoute)


class ProviderLink(BaseModel):
    """A configured provider and where to start its login."""

    provider: AuthProvider
    login_url: str


class HomeResponse(BaseModel):
    """Service index response."""

    service: str
    version: str
    providers: list[ProviderLink]


@router.get("/", response_model=HomeResponse)
async def home(
    settings: FromDishka[Settings], registry: FromDishka[ProviderRegistry]
) -> HomeResponse:
    """List the providers that can be used to log in."""
    return HomeResponse(
        service="LoginLab API",
        version=settings.version,
        providers=[
            ProviderLink(
                provider=provider,
                login_url=f"{settings.api.base_url}/auth/{provider.value}",
            )
            for provider in registry.available()
        ],
    )
