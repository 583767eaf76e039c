"""Mock component providers and the test container builder.

Importing this package registers the mock subclasses that
``build_providers`` looks up through ``__subclasses__()``.
"""

from .container import build_test_container
from .oauth import MockOAuthProvider
from .persistence import MockPersistenceProvider

__all__ = ["MockOAuthProvider", "MockPersistenceProvider", "build_test_container"]
