"""Repository interfaces for the LoginLab domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from loginlab.domain.repository.identity import (
    Duplicate,
    IdentityRepository,
    Inserted,
    InsertResult,
)

__all__ = [
    "Duplicate",
    "IdentityRepository",
    "Inserted",
    "InsertResult",
]
