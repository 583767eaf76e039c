"""Identity listing and administration use cases."""

from .deactivate_identity import DeactivateIdentityUseCase
from .get_identity import GetIdentityUseCase
from .get_identity_stats import GetIdentityStatsUseCase
from .list_identities import ListIdentitiesUseCase

__all__ = [
    "DeactivateIdentityUseCase",
    "GetIdentityStatsUseCase",
    "GetIdentityUseCase",
    "ListIdentitiesUseCase",
]
