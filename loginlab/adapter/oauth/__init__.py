"""OAuth provider adapter."""

from .client import HttpxOAuthClient, MockOAuthClient
from .providers import PROVIDER_ENDPOINTS, ProviderEndpoints

__all__ = [
    "HttpxOAuthClient",
    "MockOAuthClient",
    "PROVIDER_ENDPOINTS",
    "ProviderEndpoints",
]
