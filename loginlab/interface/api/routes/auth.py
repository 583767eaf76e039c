"""OAuth login and callback routes."""

import logging

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from loginlab.application.usecase.auth import HandleCallbackUseCase
from loginlab.application.usecase.auth.handle_callback import (
    HandleCallbackRequest,
    TokenMetadata,
)
from loginlab.domain.model import PublicIdentity
from loginlab.domain.service import AuthService
from loginlab.domain.value import AuthProvider, ProfileData
from loginlab.interface.api.errors import error_body

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"], route_class=DishkaRoute)


class CallbackResponse(BaseModel):
    """Completed login: the stored identity plus what the provider sent.

    Token values are never included.
    """

    message: str
    provider: AuthProvider
    user: PublicIdentity
    profile: ProfileData
    tokens: TokenMetadata


@router.get("/auth/{provider}")
async def initiate_login(
    provider: str,
    auth_service: FromDishka[AuthService],
    state: str | None = None,
) -> RedirectResponse:
    """Redirect to the provider's authorization page.

    Args:
        provider: Provider name from the path
        auth_service: Authentication domain service from DI
        state: Optional state; defaults to ``{provider}-{epoch_ms}``

    Raises:
        UnsupportedProviderError: If provider not configured (400)
    """
    logger.info(f"Initiating {provider} login")
    auth_url = await auth_service.initiate_login(provider, state)
    return RedirectResponse(url=auth_url, status_code=status.HTTP_302_FOUND)


@router.get("/callback/{provider}", response_model=CallbackResponse)
async def oauth_callback(
    request: Request,
    provider: str,
    use_case: FromDishka[HandleCallbackUseCase],
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    error_description: str | None = None,
):
    """Handle the provider redirect after the user grants or denies access.

    Returns:
        The persisted public identity, raw profile and token metadata
    """
    if error:
        logger.warning(f"{provider} returned OAuth error: {error}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(
                request,
                status.HTTP_400_BAD_REQUEST,
                "OAuth error",
                f"OAuth provider returned an error: {error}",
                "provider_denied",
                provider=provider,
                description=error_description,
            ),
        )

    if not code:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(
                request,
                status.HTTP_400_BAD_REQUEST,
                "Missing authorization code",
                "No authorization code received from OAuth provider",
                "missing_code",
                provider=provider,
            ),
        )

    outcome = await use_case.execute(
        HandleCallbackRequest(provider=provider, code=code, state=state)
    )
    logger.info(f"{outcome.provider.value} login completed for {outcome.identity.id}")

    return CallbackResponse(
        message=f"Successfully authenticated with {outcome.provider.value}",
        provider=outcome.provider,
        user=outcome.identity,
        profile=outcome.profile_data,
        tokens=outcome.tokens,
    )
