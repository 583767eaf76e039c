"""Unit tests for the identity listing and administration use cases."""

from uuid import uuid4

import pytest

from loginlab.application.usecase.auth import HandleCallbackUseCase
from loginlab.application.usecase.auth.handle_callback import HandleCallbackRequest
from loginlab.application.usecase.identity import (
    DeactivateIdentityUseCase,
    GetIdentityStatsUseCase,
    GetIdentityUseCase,
    ListIdentitiesUseCase,
)
from loginlab.application.usecase.identity.deactivate_identity import (
    DeactivateIdentityRequest,
)
from loginlab.application.usecase.identity.get_identity import GetIdentityRequest
from loginlab.domain.error import NotFoundError
from loginlab.domain.value import AuthProvider, IdentityId
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


async def login(container, provider: str, code: str = "code"):
    use_case = await container.get(HandleCallbackUseCase)
    outcome = await use_case.execute(HandleCallbackRequest(provider=provider, code=code))
    return outcome.identity


class TestListIdentities:
    """Tests for ListIdentitiesUseCase."""

    @pytest.mark.asyncio
    async def test_lists_users_with_counts(self, unit_env):
        # Arrange
        await login(unit_env, "github")
        await login(unit_env, "google")
        await login(unit_env, "github", code="again")
        use_case = await unit_env.get(ListIdentitiesUseCase)

        # Act
        response = await use_case.execute()

        # Assert
        assert response.count == 2
        assert len(response.users) == 2
        assert {s.provider for s in response.provider_stats} == {
            AuthProvider.GITHUB,
            AuthProvider.GOOGLE,
        }
        assert "access_token" not in response.model_dump_json()


class TestGetIdentity:
    """Tests for GetIdentityUseCase."""

    @pytest.mark.asyncio
    async def test_get_existing(self, unit_env):
        identity = await login(unit_env, "twitter")
        use_case = await unit_env.get(GetIdentityUseCase)

        result = await use_case.execute(GetIdentityRequest(identity_id=identity.id))

        assert result.id == identity.id
        assert result.username == "mocktweeter"

    @pytest.mark.asyncio
    async def test_get_missing_raises(self, unit_env):
        use_case = await unit_env.get(GetIdentityUseCase)

        with pytest.raises(NotFoundError):
            await use_case.execute(GetIdentityRequest(identity_id=IdentityId(uuid4())))


class TestDeactivateIdentity:
    """Tests for DeactivateIdentityUseCase."""

    @pytest.mark.asyncio
    async def test_deactivate_then_stats_drop(self, unit_env):
        # Arrange
        identity = await login(unit_env, "instagram")
        deactivate = await unit_env.get(DeactivateIdentityUseCase)
        stats = await unit_env.get(GetIdentityStatsUseCase)

        # Act
        response = await deactivate.execute(
            DeactivateIdentityRequest(identity_id=identity.id)
        )
        totals = await stats.execute()

        # Assert
        assert response.message == "User deactivated successfully"
        assert response.user.is_active is False
        assert totals.total_users == 0
        assert totals.provider_stats == []

    @pytest.mark.asyncio
    async def test_deactivate_missing_raises(self, unit_env):
        use_case = await unit_env.get(DeactivateIdentityUseCase)

        with pytest.raises(NotFoundError):
            await use_case.execute(
                DeactivateIdentityRequest(identity_id=IdentityId(uuid4()))
            )
