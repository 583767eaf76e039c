"""create_identities

Create the identities table: one row per provider login identity, holding
the latest profile fields and token bundle. A partial unique index allows
at most one active row per (provider, provider_user_id).

Revision ID: 3c1f6d2a9b7e
Revises:
Create Date: 2026-10-19 10:12:44.201733

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3c1f6d2a9b7e"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "identities",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("provider", sa.String(32), nullable=False),
        sa.Column("provider_user_id", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("username", sa.String(255), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.Column(
            "token_type", sa.String(32), nullable=False, server_default="Bearer"
        ),
        sa.Column("expires_in", sa.Integer(), nullable=True),
        sa.Column("scope", sa.Text(), nullable=True),
        sa.Column("raw_profile_data", postgresql.JSONB(), nullable=False),
        sa.Column("raw_token_bundle", postgresql.JSONB(), nullable=False),
        sa.Column("login_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("last_login_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column(
            "is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "login_count >= 1", name="ck_identities_login_count_positive"
        ),
    )

    # At most one active identity per provider user
    op.create_index(
        "uq_identities_active_provider_user",
        "identities",
        ["provider", "provider_user_id"],
        unique=True,
        postgresql_where=sa.text("is_active = true"),
    )
    op.create_index("idx_identities_created_at", "identities", ["created_at"])
    op.create_index("idx_identities_last_login_at", "identities", ["last_login_at"])
    op.create_index("idx_identities_is_active", "identities", ["is_active"])
    op.create_index("idx_identities_provider", "identities", ["provider"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_identities_provider", table_name="identities")
    op.drop_index("idx_identities_is_active", table_name="identities")
    op.drop_index("idx_identities_last_login_at", table_name="identities")
    op.drop_index("idx_identities_created_at", table_name="identities")
    op.drop_index("uq_identities_active_provider_user", table_name="identities")
    op.drop_table("identities")
