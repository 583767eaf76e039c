"""Strongly typed identifiers for LoginLab domain entities."""

from typing import NewType
from uuid import UUID

IdentityId = NewType("IdentityId", UUID)
