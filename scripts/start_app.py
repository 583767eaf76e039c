#!/usr/bin/env python3
"""Serve the LoginLab API, reporting startup failures to Logfire."""

import sys

import logfire
import uvicorn

from loginlab.config import Settings, build_provider_registry
from loginlab.util.observability import configure_logfire


def main() -> int:
    """Log the configured providers, then hand over to uvicorn."""
    settings = Settings()

    # Configure Logfire early to catch startup errors
    configure_logfire(settings)

    providers = [p.value for p in build_provider_registry(settings).available()]
    if not providers:
        logfire.warn(
            "No OAuth providers configured; set AUTH__<PROVIDER>__CLIENT_ID "
            "and AUTH__<PROVIDER>__CLIENT_SECRET"
        )

    logfire.info(
        "Starting LoginLab API",
        environment=settings.environment,
        base_url=settings.api.base_url,
        providers=providers,
    )

    try:
        uvicorn.run(
            "loginlab.interface.api.main:app",
            host="0.0.0.0",
            port=settings.port,
            log_level="debug" if settings.debug else "info",
            reload=settings.environment == "development",
            # Client IPs for rate limiting come from the proxy's headers
            proxy_headers=True,
        )
    except Exception as e:
        logfire.error(
            "Application startup failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        raise

    return 0


if __name__ == "__main__":
    sys.exit(main())
