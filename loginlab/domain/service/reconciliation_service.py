"""Identity reconciliation domain service.

Maps one successful OAuth exchange onto exactly one durable identity record.
"""

from datetime import datetime, timezone
from typing import Callable

import logfire

from loginlab.domain.model.identity import IdentityPatch, IdentityRecord
from loginlab.domain.repository import IdentityRepository, Inserted
from loginlab.domain.value import (
    AuthProvider,
    ProfileData,
    TokenBundle,
    extract_profile,
)

from .base import Service


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReconciliationService(Service):
    """Domain service turning (provider, tokens, profile) into one identity.

    No locks are taken here. Mutual exclusion for concurrent logins of the
    same provider identity comes from the repository's unique index and its
    atomic insert/upsert statements.
    """

    def __init__(
        self,
        identity_repository: IdentityRepository,
        reactivate_deactivated: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize reconciliation service.

        Args:
            identity_repository: Identity repository
            reactivate_deactivated: Reactivate a soft-deleted identity on
                login instead of creating a fresh record
            clock: Source of "now" for login timestamps
        """
        self.identity_repository = identity_repository
        self.reactivate_deactivated = reactivate_deactivated
        self.clock = clock

    async def reconcile(
        self,
        provider: AuthProvider,
        token_bundle: TokenBundle,
        profile_data: ProfileData,
    ) -> IdentityRecord:
        """Persist a successful login as a single up-to-date identity record.

        Steps:
        1. Extract the provider user ID from the profile
        2. Returning user: apply the login to the active record
        3. New user: insert a record with login_count 1
        4. Insert lost a race: upsert, converging on the winner's record

        Args:
            provider: Provider that issued the identity
            token_bundle: Tokens from the code exchange
            profile_data: Raw provider profile payload

        Returns:
            The persisted identity record

        Raises:
            MissingIdentityError: If the profile carries no identifier
        """
        summary = extract_profile(provider, profile_data)
        patch = IdentityPatch.from_login(summary, token_bundle, profile_data)

        with logfire.span(
            "reconciliation_service.reconcile",
            provider=provider.value,
            provider_user_id=summary.provider_user_id,
        ):
            now = self.clock()

            existing = await self.identity_repository.find_active(
                provider, summary.provider_user_id
            )
            if existing:
                updated = await self.identity_repository.record_login(
                    existing.id, patch, now
                )
                if updated:
                    logfire.info(
                        "Updated existing identity",
                        identity_id=str(updated.id),
                        provider=provider.value,
                        label=summary.label(),
                        login_count=updated.login_count,
                    )
                    return updated
                # Deactivated between the read and the update
                logfire.warn(
                    "Identity no longer active, creating a new record",
                    identity_id=str(existing.id),
                    provider=provider.value,
                )

            if self.reactivate_deactivated:
                reactivated = await self._reactivate(patch, now)
                if reactivated:
                    return reactivated

            result = await self.identity_repository.insert(
                IdentityRecord.first_login(patch, now)
            )
            if isinstance(result, Inserted):
                logfire.info(
                    "Saved new identity",
                    identity_id=str(result.record.id),
                    provider=provider.value,
                    label=summary.label(),
                )
                return result.record

            # Another login for the same identity inserted first
            logfire.warn(
                "Concurrent insert detected, retrying as upsert",
                provider=provider.value,
                provider_user_id=summary.provider_user_id,
            )
            record = await self.identity_repository.upsert(
                provider, summary.provider_user_id, patch, now
            )
            logfire.info(
                "Identity updated after duplicate insert",
                identity_id=str(record.id),
                provider=provider.value,
                login_count=record.login_count,
            )
            return record

    async def _reactivate(
        self, patch: IdentityPatch, now: datetime
    ) -> IdentityRecord | None:
        inactive = await self.identity_repository.find_latest_inactive(
            patch.provider, patch.provider_user_id
        )
        if not inactive:
            return None

        record = await self.identity_repository.reactivate(inactive.id, patch, now)
        if record:
            logfire.info(
                "Reactivated deactivated identity",
                identity_id=str(record.id),
                provider=patch.provider.value,
                login_count=record.login_count,
            )
        return record
