"""PostgreSQL repository implementations."""

from loginlab.persistence.repository.identity import PostgresIdentityRepository

__all__ = ["PostgresIdentityRepository"]
