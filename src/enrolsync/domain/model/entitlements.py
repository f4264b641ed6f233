"""Trial entitlements and the usage rows read by the quota checker."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True)
class TrialEntitlement:
    tier: str
    starts_at: datetime
    expires_at: datetime
    active: bool = True

    @classmethod
    def starting(cls, *, tier: str, now: datetime, days: int) -> TrialEntitlement:
        return cls(tier=tier, starts_at=now, expires_at=now + timedelta(days=days))


@dataclass(eq=False, kw_only=True)
class AiTierGrant:
    """Row in ``user_ai_tiers``; the quota checker's fallback tier source."""

    id: UUID = field(default_factory=uuid4)
    user_id: UUID
    tier: str
    assigned_reason: str
    is_active: bool = True
    expires_at: datetime | None = None


@dataclass(eq=False, kw_only=True)
class AiUsageTracker:
    """Row in ``user_ai_usage``; the quota checker's primary tier source."""

    user_id: UUID
    current_tier: str
