"""Infrastructure providers: the OAuth client and the identity store."""

from .oauth import OAuthProvider, ProdOAuthProvider
from .persistence import PersistenceProvider, ProdPersistenceProvider

__all__ = [
    "OAuthProvider",
    "PersistenceProvider",
    "ProdOAuthProvider",
    "ProdPersistenceProvider",
]
