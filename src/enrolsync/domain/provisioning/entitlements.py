"""Trial entitlement for newly created guardian accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from enrolsync.domain.errors import StoreError
from enrolsync.domain.model import AiTierGrant, AiUsageTracker, TrialEntitlement

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from uuid import UUID

    from enrolsync.domain.ports import ProvisioningUnitOfWork

log = getLogger(__name__)

ACTIVE_SEAT_STATUS = "active"


@dataclass(slots=True)
class EntitlementResult:
    """Which of the three trial writes landed.

    ``skipped`` is set when the account already carried a trial and nothing
    was written.
    """

    entitlement: TrialEntitlement | None = None
    profile_updated: bool = False
    tier_granted: bool = False
    usage_recorded: bool = False
    skipped: bool = False
    errors: list[str] = field(default_factory=list[str])

    @property
    def complete(self) -> bool:
        return self.skipped or (self.profile_updated and self.tier_granted and self.usage_recorded)


class EntitlementGrantor:
    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], ProvisioningUnitOfWork],
        tier: str,
        trial_days: int,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._tier = tier
        self._trial_days = trial_days

    @property
    def assigned_reason(self) -> str:
        return f"{self._trial_days}-day trial - {self._tier} tier"

    def grant(self, profile_id: UUID, *, now: datetime) -> EntitlementResult:
        """Write the profile trial columns, the tier grant and the usage row.

        The three writes are independent; one failing does not stop the others.
        """

        with self._uow_factory() as uow:
            profile = uow.repositories.profiles.get(profile_id)
            if profile is not None and profile.has_trial:
                log.info("Profile %s already has a trial; not granting another", profile_id)
                return EntitlementResult(skipped=True)

        entitlement = TrialEntitlement.starting(tier=self._tier, now=now, days=self._trial_days)
        result = EntitlementResult(entitlement=entitlement)
        result.profile_updated = self._attempt(
            result, "profile trial", lambda: self._update_profile(profile_id, entitlement)
        )
        result.tier_granted = self._attempt(
            result, "AI tier grant", lambda: self._grant_tier(profile_id, entitlement)
        )
        result.usage_recorded = self._attempt(
            result, "AI usage tracker", lambda: self._record_usage(profile_id, entitlement)
        )
        log.info(
            "Trial %s for profile %s until %s (complete=%s)",
            entitlement.tier,
            profile_id,
            entitlement.expires_at,
            result.complete,
        )
        return result

    def _attempt(self, result: EntitlementResult, label: str, write: Callable[[], None]) -> bool:
        try:
            write()
        except StoreError as exc:
            log.warning("Failed to write %s: %s", label, exc)
            result.errors.append(f"{label}: {exc}")
            return False
        return True

    def _update_profile(self, profile_id: UUID, entitlement: TrialEntitlement) -> None:
        with self._uow_factory() as uow:
            profile = uow.repositories.profiles.get(profile_id)
            if profile is None:
                raise StoreError(f"Profile {profile_id} not found")
            profile.is_trial = True
            profile.trial_plan_tier = entitlement.tier
            profile.trial_started_at = entitlement.starts_at
            profile.trial_ends_at = entitlement.expires_at
            profile.trial_granted_at = entitlement.starts_at
            profile.seat_status = ACTIVE_SEAT_STATUS
            profile.subscription_tier = entitlement.tier
            uow.commit()

    def _grant_tier(self, profile_id: UUID, entitlement: TrialEntitlement) -> None:
        with self._uow_factory() as uow:
            grant = uow.repositories.ai_tiers.find_for_user(profile_id)
            if grant is None:
                uow.repositories.ai_tiers.add(
                    AiTierGrant(
                        user_id=profile_id,
                        tier=entitlement.tier,
                        assigned_reason=self.assigned_reason,
                        is_active=entitlement.active,
                        expires_at=entitlement.expires_at,
                    )
                )
            else:
                grant.tier = entitlement.tier
                grant.assigned_reason = self.assigned_reason
                grant.is_active = entitlement.active
                grant.expires_at = entitlement.expires_at
            uow.commit()

    def _record_usage(self, profile_id: UUID, entitlement: TrialEntitlement) -> None:
        with self._uow_factory() as uow:
            usage = uow.repositories.ai_usage.get(profile_id)
            if usage is None:
                uow.repositories.ai_usage.add(
                    AiUsageTracker(user_id=profile_id, current_tier=entitlement.tier)
                )
            else:
                usage.current_tier = entitlement.tier
            uow.commit()
