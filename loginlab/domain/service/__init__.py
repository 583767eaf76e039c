"""Domain services."""

from .auth_service import AuthService, OAuthClient, OAuthClientError
from .base import Service
from .identity_service import IdentityService, ProviderCount
from .reconciliation_service import ReconciliationService

__all__ = [
    "AuthService",
    "IdentityService",
    "OAuthClient",
    "OAuthClientError",
    "ProviderCount",
    "ReconciliationService",
    "Service",
]
