"""Exception handlers mapping domain errors to JSON responses."""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from loginlab.config import Settings
from loginlab.domain.error import (
    DomainError,
    MissingIdentityError,
    NotFoundError,
    UnsupportedProviderError,
    UpstreamProviderError,
)
from loginlab.util.logging import mask_credentials

logger = logging.getLogger(__name__)


def error_body(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    category: str,
    **extra: Any,
) -> dict[str, Any]:
    """Common error payload shape for every error response."""
    return {
        "error": error,
        "message": message,
        "status": status_code,
        "path": request.url.path,
        "method": request.method,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "category": category,
        **extra,
    }


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Register handlers for the domain error hierarchy.

    Upstream response bodies are only included when ``debug`` is on.
    """

    @app.exception_handler(UnsupportedProviderError)
    async def unsupported_provider(
        request: Request, exc: UnsupportedProviderError
    ) -> JSONResponse:
        code = status.HTTP_400_BAD_REQUEST
        return JSONResponse(
            status_code=code,
            content=error_body(
                request,
                code,
                "Unsupported provider",
                str(exc),
                "unsupported_provider",
                available_providers=exc.available,
            ),
        )

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        code = status.HTTP_404_NOT_FOUND
        return JSONResponse(
            status_code=code,
            content=error_body(
                request, code, f"{exc.resource} not found", str(exc), "not_found"
            ),
        )

    @app.exception_handler(UpstreamProviderError)
    async def upstream_failure(
        request: Request, exc: UpstreamProviderError
    ) -> JSONResponse:
        code = status.HTTP_502_BAD_GATEWAY
        logger.warning(
            f"{exc} provider={exc.provider} upstream_status={exc.upstream_status}"
        )
        extra: dict[str, Any] = {
            "provider": exc.provider,
            "upstream_status": exc.upstream_status,
        }
        if settings.debug:
            extra["debug"] = {"detail": exc.detail}
        return JSONResponse(
            status_code=code,
            content=error_body(
                request, code, "Authentication failed", str(exc), exc.category, **extra
            ),
        )

    @app.exception_handler(MissingIdentityError)
    async def missing_identity(
        request: Request, exc: MissingIdentityError
    ) -> JSONResponse:
        code = status.HTTP_502_BAD_GATEWAY
        return JSONResponse(
            status_code=code,
            content=error_body(
                request,
                code,
                "Authentication failed",
                str(exc),
                "missing_identity",
                provider=exc.provider,
            ),
        )

    @app.exception_handler(DomainError)
    async def domain_error(request: Request, exc: DomainError) -> JSONResponse:
        code = status.HTTP_400_BAD_REQUEST
        return JSONResponse(
            status_code=code,
            content=error_body(request, code, "Bad request", str(exc), "domain_error"),
        )

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception) -> JSONResponse:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        extra: dict[str, Any] = {}
        if settings.debug:
            extra["debug"] = {
                "type": type(exc).__name__,
                "detail": mask_credentials(str(exc)),
            }
        return JSONResponse(
            status_code=code,
            content=error_body(
                request,
                code,
                "Internal Server Error",
                "An unexpected error occurred",
                "internal_error",
                **extra,
            ),
        )
