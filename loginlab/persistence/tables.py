"""SQLAlchemy table definitions for LoginLab.

These table definitions match the schema defined in Alembic migrations.
Column types are portable so the same table runs on PostgreSQL and SQLite.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    Uuid,
    true,
)
from sqlalchemy.dialects.postgresql import JSONB

metadata = MetaData()

JSONType = JSON().with_variant(JSONB(), "postgresql")

# ============================================================================
# IDENTITIES TABLE (one row per provider login identity)
# ============================================================================
identities_table = Table(
    "identities",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("provider", String(32), nullable=False),
    Column("provider_user_id", String(255), nullable=False),
    Column("email", String(320), nullable=True),
    Column("display_name", String(255), nullable=True),
    Column("username", String(255), nullable=True),
    Column("avatar_url", Text, nullable=True),
    Column("access_token", Text, nullable=False),
    Column("refresh_token", Text, nullable=True),
    Column("token_type", String(32), nullable=False, server_default="Bearer"),
    Column("expires_in", Integer, nullable=True),
    Column("scope", Text, nullable=True),
    Column("raw_profile_data", JSONType, nullable=False),
    Column("raw_token_bundle", JSONType, nullable=False),
    Column("login_count", Integer, nullable=False, server_default="1"),
    Column("last_login_at", DateTime(timezone=True), nullable=False),
    Column("is_active", Boolean, nullable=False, server_default=true()),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    CheckConstraint("login_count >= 1", name="ck_identities_login_count_positive"),
)

# At most one active row per provider identity; deactivated rows are history
ACTIVE_IDENTITY = identities_table.c.is_active == true()
IDENTITY_KEY = [identities_table.c.provider, identities_table.c.provider_user_id]

Index(
    "uq_identities_active_provider_user",
    *IDENTITY_KEY,
    unique=True,
    postgresql_where=ACTIVE_IDENTITY,
    sqlite_where=ACTIVE_IDENTITY,
)
Index("idx_identities_created_at", identities_table.c.created_at)
Index("idx_identities_last_login_at", identities_table.c.last_login_at)
Index("idx_identities_is_active", identities_table.c.is_active)
Index("idx_identities_provider", identities_table.c.provider)
