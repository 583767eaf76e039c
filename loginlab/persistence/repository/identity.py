"""Identity repository implementation using PostgreSQL.

Every write is a single statement so the partial unique index is the only
arbiter between concurrent logins. The dialect-specific INSERT construct is
picked from the session's bind, which lets the same code run on SQLite.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import case, exists, false, func, literal, select, true, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from loginlab.domain.error import NotFoundError
from loginlab.domain.model import IdentityPatch, IdentityRecord, PublicIdentity
from loginlab.domain.repository import (
    Duplicate,
    IdentityRepository,
    Inserted,
    InsertResult,
)
from loginlab.domain.value import AuthProvider, IdentityId
from loginlab.persistence.mappers import (
    PUBLIC_COLUMNS,
    identity_record_to_dict,
    row_to_identity_record,
    row_to_public_identity,
)
from loginlab.persistence.tables import (
    ACTIVE_IDENTITY,
    IDENTITY_KEY,
    identities_table,
)

PROFILE_COLUMNS = ("email", "display_name", "username", "avatar_url")


class PostgresIdentityRepository(IdentityRepository):
    """PostgreSQL implementation of IdentityRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    def _insert(self):
        if self.session.bind.dialect.name == "sqlite":
            return sqlite_insert(identities_table)
        return pg_insert(identities_table)

    def _login_values(self, patch: IdentityPatch, now: datetime) -> dict[str, Any]:
        """Column updates for one more login on an existing row."""
        t = identities_table
        values: dict[str, Any] = {
            "access_token": patch.access_token.get_secret_value(),
            "refresh_token": (
                patch.refresh_token.get_secret_value() if patch.refresh_token else None
            ),
            "token_type": patch.token_type,
            "expires_in": patch.expires_in,
            "scope": patch.scope,
            "raw_profile_data": patch.raw_profile_data,
            "raw_token_bundle": patch.raw_token_bundle,
            "login_count": t.c.login_count + 1,
            "last_login_at": case(
                (t.c.last_login_at > now, t.c.last_login_at),
                else_=literal(now, t.c.last_login_at.type),
            ),
            "updated_at": now,
        }
        # Profile fields absent from this login keep their stored value
        for column in PROFILE_COLUMNS:
            value = getattr(patch, column)
            if value is not None:
                values[column] = value
        return values

    async def find_active(
        self, provider: AuthProvider, provider_user_id: str
    ) -> Optional[IdentityRecord]:
        stmt = select(identities_table).where(
            identities_table.c.provider == provider.value,
            identities_table.c.provider_user_id == provider_user_id,
            ACTIVE_IDENTITY,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()

        if not row:
            return None

        return row_to_identity_record(dict(row))

    async def find_latest_inactive(
        self, provider: AuthProvider, provider_user_id: str
    ) -> Optional[IdentityRecord]:
        stmt = (
            select(identities_table)
            .where(
                identities_table.c.provider == provider.value,
                identities_table.c.provider_user_id == provider_user_id,
                identities_table.c.is_active == false(),
            )
            .order_by(identities_table.c.updated_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()

        if not row:
            return None

        return row_to_identity_record(dict(row))

    async def find_by_id(self, identity_id: IdentityId) -> Optional[PublicIdentity]:
        stmt = select(*(identities_table.c[name] for name in PUBLIC_COLUMNS)).where(
            identities_table.c.id == identity_id
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()

        if not row:
            return None

        return row_to_public_identity(dict(row))

    async def insert(self, record: IdentityRecord) -> InsertResult:
        stmt = (
            self._insert()
            .values(**identity_record_to_dict(record))
            .on_conflict_do_nothing(
                index_elements=IDENTITY_KEY, index_where=ACTIVE_IDENTITY
            )
            .returning(*identities_table.c)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        await self.session.flush()

        if not row:
            return Duplicate(
                provider=record.provider, provider_user_id=record.provider_user_id
            )

        return Inserted(record=row_to_identity_record(dict(row)))

    async def record_login(
        self, identity_id: IdentityId, patch: IdentityPatch, now: datetime
    ) -> Optional[IdentityRecord]:
        stmt = (
            update(identities_table)
            .where(identities_table.c.id == identity_id, ACTIVE_IDENTITY)
            .values(**self._login_values(patch, now))
            .returning(*identities_table.c)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        await self.session.flush()

        if not row:
            return None

        return row_to_identity_record(dict(row))

    async def upsert(
        self,
        provider: AuthProvider,
        provider_user_id: str,
        patch: IdentityPatch,
        now: datetime,
    ) -> IdentityRecord:
        t = identities_table
        stmt = self._insert().values(
            **identity_record_to_dict(IdentityRecord.first_login(patch, now))
        )
        excluded = stmt.excluded
        set_ = {
            "access_token": excluded.access_token,
            "refresh_token": excluded.refresh_token,
            "token_type": excluded.token_type,
            "expires_in": excluded.expires_in,
            "scope": excluded.scope,
            "raw_profile_data": excluded.raw_profile_data,
            "raw_token_bundle": excluded.raw_token_bundle,
            "login_count": t.c.login_count + 1,
            "last_login_at": case(
                (t.c.last_login_at > excluded.last_login_at, t.c.last_login_at),
                else_=excluded.last_login_at,
            ),
            "updated_at": excluded.updated_at,
        }
        for column in PROFILE_COLUMNS:
            set_[column] = func.coalesce(excluded[column], t.c[column])

        stmt = stmt.on_conflict_do_update(
            index_elements=IDENTITY_KEY, index_where=ACTIVE_IDENTITY, set_=set_
        ).returning(*t.c)
        result = await self.session.execute(stmt)
        row = result.mappings().one()
        await self.session.flush()

        return row_to_identity_record(dict(row))

    async def reactivate(
        self, identity_id: IdentityId, patch: IdentityPatch, now: datetime
    ) -> Optional[IdentityRecord]:
        t = identities_table
        active = t.alias("active_identity")
        pair_taken = exists().where(
            active.c.provider == t.c.provider,
            active.c.provider_user_id == t.c.provider_user_id,
            active.c.is_active == true(),
        )
        stmt = (
            update(t)
            .where(t.c.id == identity_id, t.c.is_active == false(), ~pair_taken)
            .values(is_active=True, **self._login_values(patch, now))
            .returning(*t.c)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        await self.session.flush()

        if not row:
            return None

        return row_to_identity_record(dict(row))

    async def deactivate(self, identity_id: IdentityId) -> PublicIdentity:
        stmt = (
            update(identities_table)
            .where(identities_table.c.id == identity_id, ACTIVE_IDENTITY)
            .values(is_active=False, updated_at=datetime.now(timezone.utc))
            .returning(*(identities_table.c[name] for name in PUBLIC_COLUMNS))
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        await self.session.flush()

        if row:
            return row_to_public_identity(dict(row))

        # Already inactive rows keep their updated_at
        existing = await self.find_by_id(identity_id)
        if existing is None:
            raise NotFoundError("Identity", str(identity_id))
        return existing

    async def list_active(self) -> list[PublicIdentity]:
        stmt = (
            select(*(identities_table.c[name] for name in PUBLIC_COLUMNS))
            .where(ACTIVE_IDENTITY)
            .order_by(identities_table.c.last_login_at.desc())
        )
        result = await self.session.execute(stmt)
        rows = result.mappings().all()

        return [row_to_public_identity(dict(row)) for row in rows]

    async def count_by_provider(self) -> dict[AuthProvider, int]:
        count = func.count().label("count")
        stmt = (
            select(identities_table.c.provider, count)
            .where(ACTIVE_IDENTITY)
            .group_by(identities_table.c.provider)
            .order_by(count.desc())
        )
        result = await self.session.execute(stmt)

        return {AuthProvider(provider): total for provider, total in result.all()}

    async def count_active(self) -> int:
        stmt = select(func.count()).select_from(identities_table).where(ACTIVE_IDENTITY)
        result = await self.session.execute(stmt)
        return result.scalar_one()
