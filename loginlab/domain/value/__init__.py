"""Domain value objects for LoginLab."""

from loginlab.domain.value.identifiers import IdentityId
from loginlab.domain.value.types import (
    PROFILE_FIELDS,
    AuthProvider,
    ProfileData,
    ProfileFieldMap,
    ProfileSummary,
    ProviderCredentials,
    ProviderRegistry,
    TokenBundle,
    extract_profile,
)

__all__ = [
    # Identifiers
    "IdentityId",
    # Types
    "AuthProvider",
    "PROFILE_FIELDS",
    "ProfileData",
    "ProfileFieldMap",
    "ProfileSummary",
    "ProviderCredentials",
    "ProviderRegistry",
    "TokenBundle",
    "extract_profile",
]
