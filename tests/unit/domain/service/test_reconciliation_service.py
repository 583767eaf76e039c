"""Unit tests for ReconciliationService."""

import asyncio
from typing import Optional

import pytest

from loginlab.domain.error import MissingIdentityError
from loginlab.domain.model import IdentityRecord
from loginlab.domain.repository import IdentityRepository
from loginlab.domain.service import ReconciliationService
from loginlab.domain.value import AuthProvider
from loginlab.persistence.repository.inmemory import InMemoryIdentityRepository
from tests.factories import FixedClock, make_token_bundle
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked
unit_env = create_env_fixture()

ALICE = {"id": 42, "login": "alice"}


class StaleReadIdentityRepository(InMemoryIdentityRepository):
    """Repository whose reads never see an active record.

    Every reconciliation then takes the insert path, as two first-time
    logins do when both read before either writes.
    """

    async def find_active(
        self, provider: AuthProvider, provider_user_id: str
    ) -> Optional[IdentityRecord]:
        await asyncio.sleep(0)
        return None


def make_service(
    repo: IdentityRepository | None = None,
    clock: FixedClock | None = None,
    reactivate_deactivated: bool = False,
) -> ReconciliationService:
    return ReconciliationService(
        identity_repository=repo or InMemoryIdentityRepository(),
        reactivate_deactivated=reactivate_deactivated,
        clock=clock or FixedClock(),
    )


class TestReconcile:
    """Tests for the basic reconcile flows."""

    @pytest.mark.asyncio
    async def test_first_login_creates_record(self, unit_env):
        """A never-seen identity is inserted with login_count 1."""
        # Arrange
        service = await unit_env.get(ReconciliationService)
        repo = await unit_env.get(IdentityRepository)

        # Act
        record = await service.reconcile(
            AuthProvider.GITHUB, make_token_bundle("tok1"), ALICE
        )

        # Assert
        assert record.provider == AuthProvider.GITHUB
        assert record.provider_user_id == "42"
        assert record.username == "alice"
        assert record.login_count == 1
        assert record.is_active is True
        assert record.access_token.get_secret_value() == "tok1"
        assert record.raw_profile_data == ALICE
        assert await repo.count_active() == 1

    @pytest.mark.asyncio
    async def test_returning_login_updates_existing_record(self, unit_env):
        """A second login overwrites the tokens and bumps login_count."""
        # Arrange
        service = await unit_env.get(ReconciliationService)
        repo = await unit_env.get(IdentityRepository)
        first = await service.reconcile(
            AuthProvider.GITHUB, make_token_bundle("tok1"), ALICE
        )

        # Act
        second = await service.reconcile(
            AuthProvider.GITHUB, make_token_bundle("tok2"), ALICE
        )

        # Assert
        assert second.id == first.id
        assert second.access_token.get_secret_value() == "tok2"
        assert second.login_count == 2
        assert await repo.count_active() == 1

    @pytest.mark.asyncio
    async def test_profile_without_identifier_fails(self, unit_env):
        """No id and no login means there is nothing to key the record on."""
        # Arrange
        service = await unit_env.get(ReconciliationService)
        repo = await unit_env.get(IdentityRepository)

        # Act & Assert
        with pytest.raises(MissingIdentityError):
            await service.reconcile(
                AuthProvider.GITHUB, make_token_bundle(), {"name": "Nobody"}
            )
        assert await repo.count_active() == 0

    @pytest.mark.asyncio
    async def test_login_after_deactivation_creates_fresh_record(self, unit_env):
        """With the default policy the deactivated record stays as history."""
        # Arrange
        service = await unit_env.get(ReconciliationService)
        repo = await unit_env.get(IdentityRepository)
        original = await service.reconcile(
            AuthProvider.GITHUB, make_token_bundle("tok1"), ALICE
        )

        # Act
        deactivated = await repo.deactivate(original.id)
        found = await repo.find_active(AuthProvider.GITHUB, "42")
        fresh = await service.reconcile(
            AuthProvider.GITHUB, make_token_bundle("tok2"), ALICE
        )

        # Assert
        assert deactivated.is_active is False
        assert found is None
        assert fresh.id != original.id
        assert fresh.login_count == 1
        assert fresh.is_active is True
        old = await repo.find_by_id(original.id)
        assert old is not None and old.is_active is False

    @pytest.mark.asyncio
    async def test_same_user_id_on_different_providers_is_separate(self):
        service = make_service()

        github = await service.reconcile(
            AuthProvider.GITHUB, make_token_bundle(), {"id": "7", "login": "x"}
        )
        twitter = await service.reconcile(
            AuthProvider.TWITTER, make_token_bundle(), {"id": "7", "username": "x"}
        )

        assert github.id != twitter.id
        assert github.login_count == twitter.login_count == 1

    @pytest.mark.asyncio
    async def test_missing_profile_fields_do_not_erase_stored_values(self):
        service = make_service()
        await service.reconcile(
            AuthProvider.GITHUB,
            make_token_bundle(),
            {"id": 42, "login": "alice", "email": "alice@example.com"},
        )

        record = await service.reconcile(
            AuthProvider.GITHUB, make_token_bundle("tok2"), {"id": 42}
        )

        assert record.email == "alice@example.com"
        assert record.username == "alice"
        assert record.raw_profile_data == {"id": 42}


class TestReconcileProperties:
    """Properties that hold over sequences of reconciliations."""

    @pytest.mark.asyncio
    async def test_repeated_logins_keep_one_record_and_count_each(self):
        repo = InMemoryIdentityRepository()
        service = make_service(repo)

        for n in range(1, 6):
            record = await service.reconcile(
                AuthProvider.GITHUB, make_token_bundle(f"tok{n}"), ALICE
            )
            assert record.login_count == n

        assert await repo.count_active() == 1
        assert len(await repo.list_active()) == 1

    @pytest.mark.asyncio
    async def test_last_login_never_moves_backward(self):
        clock = FixedClock()
        service = make_service(clock=clock)
        first = await service.reconcile(AuthProvider.GITHUB, make_token_bundle(), ALICE)

        clock.advance(minutes=10)
        second = await service.reconcile(
            AuthProvider.GITHUB, make_token_bundle(), ALICE
        )
        # A login whose clock reading lags the stored value
        clock.advance(minutes=-30)
        third = await service.reconcile(
            AuthProvider.GITHUB, make_token_bundle(), ALICE
        )

        assert first.last_login_at <= second.last_login_at <= third.last_login_at
        assert third.last_login_at == second.last_login_at
        assert third.login_count == 3

    @pytest.mark.asyncio
    async def test_display_view_never_contains_secrets(self):
        service = make_service()
        record = await service.reconcile(
            AuthProvider.GITHUB,
            make_token_bundle("access-value", refresh_token="refresh-value"),
            ALICE,
        )

        dumped = record.to_public().model_dump_json()

        assert "access-value" not in dumped
        assert "refresh-value" not in dumped
        assert "raw_profile_data" not in dumped
        assert "raw_token_bundle" not in dumped


class TestConcurrentReconcile:
    """Concurrent first-time logins converge on one record."""

    @pytest.mark.asyncio
    async def test_concurrent_first_logins_converge(self):
        """Both callers take the insert path; the loser upserts."""
        # Arrange
        repo = StaleReadIdentityRepository()
        service = make_service(repo)

        # Act
        first, second = await asyncio.gather(
            service.reconcile(AuthProvider.GITHUB, make_token_bundle("tok-a"), ALICE),
            service.reconcile(AuthProvider.GITHUB, make_token_bundle("tok-b"), ALICE),
        )

        # Assert
        assert first.id == second.id
        assert await repo.count_active() == 1
        stored = await InMemoryIdentityRepository.find_active(
            repo, AuthProvider.GITHUB, "42"
        )
        assert stored.login_count == 2

    @pytest.mark.asyncio
    async def test_many_concurrent_logins_converge(self):
        repo = StaleReadIdentityRepository()
        service = make_service(repo)

        records = await asyncio.gather(
            *(
                service.reconcile(AuthProvider.GITHUB, make_token_bundle(f"t{i}"), ALICE)
                for i in range(10)
            )
        )

        assert len({record.id for record in records}) == 1
        assert await repo.count_active() == 1
        assert max(record.login_count for record in records) == 10


class TestReactivationPolicy:
    """Tests for the reactivate_deactivated setting."""

    @pytest.mark.asyncio
    async def test_reactivates_deactivated_record_when_enabled(self):
        # Arrange
        repo = InMemoryIdentityRepository()
        service = make_service(repo, reactivate_deactivated=True)
        original = await service.reconcile(
            AuthProvider.GITHUB, make_token_bundle("tok1"), ALICE
        )
        await repo.deactivate(original.id)

        # Act
        record = await service.reconcile(
            AuthProvider.GITHUB, make_token_bundle("tok2"), ALICE
        )

        # Assert
        assert record.id == original.id
        assert record.is_active is True
        assert record.login_count == 2
        assert record.access_token.get_secret_value() == "tok2"
        assert await repo.count_active() == 1

    @pytest.mark.asyncio
    async def test_enabled_policy_still_inserts_never_seen_identity(self):
        repo = InMemoryIdentityRepository()
        service = make_service(repo, reactivate_deactivated=True)

        record = await service.reconcile(AuthProvider.GITHUB, make_token_bundle(), ALICE)

        assert record.login_count == 1
        assert await repo.count_active() == 1

    @pytest.mark.asyncio
    async def test_disabled_policy_leaves_history_untouched(self):
        repo = InMemoryIdentityRepository()
        service = make_service(repo)
        original = await service.reconcile(AuthProvider.GITHUB, make_token_bundle(), ALICE)
        await repo.deactivate(original.id)

        await service.reconcile(AuthProvider.GITHUB, make_token_bundle(), ALICE)

        old = await repo.find_by_id(original.id)
        assert old.is_active is False
        assert old.login_count == 1
