"""Unit tests for IdentityService."""

from uuid import uuid4

import pytest

from loginlab.domain.error import NotFoundError
from loginlab.domain.repository import IdentityRepository
from loginlab.domain.service import IdentityService, ProviderCount
from loginlab.domain.value import AuthProvider, IdentityId
from tests.factories import FixedClock, make_record
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


async def seed(repo: IdentityRepository, clock: FixedClock, *profiles):
    """Insert one record per (provider, profile) pair, a minute apart."""
    records = []
    for provider, profile in profiles:
        result = await repo.insert(make_record(provider, profile, now=clock()))
        records.append(result.unwrap())
        clock.advance(minutes=1)
    return records


class TestListActive:
    """Tests for list_active."""

    @pytest.mark.asyncio
    async def test_most_recent_login_first(self, unit_env, clock):
        # Arrange
        service = await unit_env.get(IdentityService)
        repo = await unit_env.get(IdentityRepository)
        older, newer = await seed(
            repo,
            clock,
            (AuthProvider.GITHUB, {"id": 1, "login": "old"}),
            (AuthProvider.GOOGLE, {"id": "2", "email": "new@example.com"}),
        )

        # Act
        identities = await service.list_active()

        # Assert
        assert [i.id for i in identities] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_deactivated_identities_are_hidden(self, unit_env, clock):
        # Arrange
        service = await unit_env.get(IdentityService)
        repo = await unit_env.get(IdentityRepository)
        kept, removed = await seed(
            repo,
            clock,
            (AuthProvider.GITHUB, {"id": 1, "login": "kept"}),
            (AuthProvider.GITHUB, {"id": 2, "login": "removed"}),
        )

        # Act
        await service.deactivate(removed.id)
        identities = await service.list_active()

        # Assert
        assert [i.id for i in identities] == [kept.id]
        assert await service.count_active() == 1


class TestGetById:
    """Tests for get_by_id."""

    @pytest.mark.asyncio
    async def test_returns_public_view(self, unit_env, clock):
        service = await unit_env.get(IdentityService)
        repo = await unit_env.get(IdentityRepository)
        (record,) = await seed(repo, clock, (AuthProvider.GITHUB, {"id": 1}))

        identity = await service.get_by_id(record.id)

        assert identity.id == record.id
        assert not hasattr(identity, "access_token")

    @pytest.mark.asyncio
    async def test_unknown_id_raises_not_found(self, unit_env):
        service = await unit_env.get(IdentityService)

        with pytest.raises(NotFoundError):
            await service.get_by_id(IdentityId(uuid4()))


class TestDeactivate:
    """Tests for deactivate."""

    @pytest.mark.asyncio
    async def test_deactivate_sets_inactive(self, unit_env, clock):
        service = await unit_env.get(IdentityService)
        repo = await unit_env.get(IdentityRepository)
        (record,) = await seed(repo, clock, (AuthProvider.REDDIT, {"id": "t2x"}))

        identity = await service.deactivate(record.id)

        assert identity.is_active is False
        assert await repo.find_active(AuthProvider.REDDIT, "t2x") is None

    @pytest.mark.asyncio
    async def test_deactivate_unknown_id_raises_not_found(self, unit_env):
        service = await unit_env.get(IdentityService)

        with pytest.raises(NotFoundError):
            await service.deactivate(IdentityId(uuid4()))


class TestProviderStats:
    """Tests for provider_stats."""

    @pytest.mark.asyncio
    async def test_counts_sorted_by_count_then_name(self, unit_env, clock):
        # Arrange
        service = await unit_env.get(IdentityService)
        repo = await unit_env.get(IdentityRepository)
        await seed(
            repo,
            clock,
            (AuthProvider.TWITTER, {"id": "1"}),
            (AuthProvider.GITHUB, {"id": 1}),
            (AuthProvider.GITHUB, {"id": 2}),
            (AuthProvider.GOOGLE, {"id": "1"}),
        )

        # Act
        stats = await service.provider_stats()

        # Assert
        assert stats == [
            ProviderCount(provider=AuthProvider.GITHUB, count=2),
            ProviderCount(provider=AuthProvider.GOOGLE, count=1),
            ProviderCount(provider=AuthProvider.TWITTER, count=1),
        ]

    @pytest.mark.asyncio
    async def test_empty_store(self, unit_env):
        service = await unit_env.get(IdentityService)

        assert await service.provider_stats() == []
        assert await service.count_active() == 0
