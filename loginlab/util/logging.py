"""Logging configuration for the application.

Log lines pass through ``CredentialFilter`` so bearer tokens, token fields
and authorization codes never reach the output, even when an upstream
error body is logged verbatim.
"""

import logging
import re
import sys

from loginlab.config import Settings

MASK = "***"

CREDENTIAL_PATTERNS = [
    re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/]+=*", re.I),
    re.compile(
        r"""(["']?(?:access_token|refresh_token|id_token|client_secret)["']?\s*[:=]\s*["']?)"""
        r"""[^"'&\s,}]+""",
        re.I,
    ),
    re.compile(r"([?&]code=)[^&\s]+"),
]


def mask_credentials(text: str) -> str:
    """Replace credential values in ``text`` with ``***``."""
    for pattern in CREDENTIAL_PATTERNS:
        text = pattern.sub(lambda m: m.group(1) + MASK, text)
    return text


class CredentialFilter(logging.Filter):
    """Masks credentials in the formatted message of every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = mask_credentials(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def setup_logging(settings: Settings) -> None:
    """Configure application logging.

    DEBUG when ``debug`` is on, WARNING under test, INFO otherwise.

    Args:
        settings: Application settings
    """
    if settings.debug:
        level = logging.DEBUG
    elif settings.environment == "test":
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CredentialFilter())
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # httpx logs full request URLs, which carry codes and Instagram tokens
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger("loginlab").setLevel(level)
    logging.getLogger(__name__).info(
        "Logging configured: environment=%s level=%s",
        settings.environment,
        logging.getLevelName(level),
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance (typically ``get_logger(__name__)``)."""
    return logging.getLogger(name)
