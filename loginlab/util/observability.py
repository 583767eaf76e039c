"""Logfire setup for the API process.

Usage:
    import logfire

    logfire.info("Saved new identity", identity_id=..., provider=...)

    with logfire.span("reconciliation_service.reconcile", provider=...):
        ...

Token values are never passed as attributes; the scrubbing patterns below
are a backstop for attributes that carry provider payloads.
"""

import logfire
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from loginlab.config import Settings

# Attribute names logfire redacts in addition to its defaults
SCRUBBED_ATTRIBUTES = [
    "access_token",
    "refresh_token",
    "id_token",
    "client_secret",
    "code_verifier",
    "raw_token_bundle",
]


def should_send_to_logfire(settings: Settings) -> bool:
    """Explicit ``send_to_logfire`` wins; otherwise send iff a token is set."""
    if settings.observability.send_to_logfire is not None:
        return settings.observability.send_to_logfire
    return bool(settings.observability.logfire_token)


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire for the process.

    Set OBSERVABILITY__LOGFIRE_TOKEN to ship spans to Logfire; without it
    output stays on the console.
    """
    send = should_send_to_logfire(settings)

    logfire.configure(
        service_name="loginlab-api",
        service_version=settings.version,
        environment=settings.environment,
        send_to_logfire=send,
        token=settings.observability.logfire_token,
        scrubbing=logfire.ScrubbingOptions(extra_patterns=SCRUBBED_ATTRIBUTES),
        console=logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    )

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        send_to_logfire=send,
        git_sha=settings.git_sha,
    )


def instrument_fastapi(app: FastAPI) -> None:
    """Instrument the FastAPI app.

    Headers and query values are left out: callback URLs carry
    authorization codes and the token requests carry client secrets.
    """

    def _request_attributes(request, attributes):
        result = {
            key: value for key, value in attributes.items() if key != "values"
        }
        result["path"] = request.url.path
        if request.client:
            result["client_host"] = request.client.host
        return result

    logfire.instrument_fastapi(
        app,
        capture_headers=False,
        request_attributes_mapper=_request_attributes,
    )


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Instrument the identity store engine (statement spans)."""
    logfire.instrument_sqlalchemy(engine=engine.sync_engine, enable_commenter=True)


def instrument_httpx() -> None:
    """Instrument outbound provider calls."""
    logfire.instrument_httpx()
