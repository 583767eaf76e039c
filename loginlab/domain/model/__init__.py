"""Domain model entities for LoginLab."""

from loginlab.domain.model.identity import IdentityPatch, IdentityRecord, PublicIdentity

__all__ = [
    "IdentityPatch",
    "IdentityRecord",
    "PublicIdentity",
]
