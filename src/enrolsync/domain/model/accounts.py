"""Guardian identities, profiles and the advisory provisioning lease."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from enrolsync.domain.model.enums import AccountRole

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(frozen=True, slots=True)
class AuthIdentity:
    """Login identity as reported by the identity provider."""

    id: UUID
    email: str


@dataclass(eq=False, kw_only=True)
class GuardianProfile:
    """Profile row for a guardian; ``id`` always equals the auth identity id."""

    id: UUID
    email: str
    role: AccountRole = AccountRole.PARENT
    auth_user_id: UUID | None = None
    organization_id: UUID | None = None

    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    address: str | None = None

    is_trial: bool = False
    trial_plan_tier: str | None = None
    trial_started_at: datetime | None = None
    trial_ends_at: datetime | None = None
    trial_granted_at: datetime | None = None
    seat_status: str | None = None
    subscription_tier: str | None = None

    created_at: datetime | None = None

    @property
    def has_identity_reference(self) -> bool:
        return self.auth_user_id is not None

    @property
    def has_trial(self) -> bool:
        return self.trial_granted_at is not None


@dataclass(eq=False, kw_only=True)
class ProvisioningLease:
    """Short-lived advisory lock keyed by normalized guardian email."""

    key: str
    holder: str
    acquired_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


@dataclass(slots=True)
class ProfileSeed:
    """Values used to create a profile from an approved registration."""

    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    address: str | None = None
    organization_id: UUID | None = None
