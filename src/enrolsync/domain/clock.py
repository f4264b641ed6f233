"""Time helpers: a UTC clock and an explicit per-invocation deadline."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime

from enrolsync.domain.errors import InvocationTimeoutError

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def utc_today(clock: Clock = utc_now) -> date:
    return clock().date()


@dataclass(slots=True)
class Deadline:
    """Wall-clock budget for one invocation.

    ``budget_seconds=None`` means unbounded. The monotonic clock is injectable so
    tests can drive expiry without sleeping.
    """

    budget_seconds: float | None
    started_at: float
    monotonic: Callable[[], float] = time.monotonic

    @classmethod
    def start(
        cls,
        budget_seconds: float | None,
        *,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> Deadline:
        return cls(budget_seconds=budget_seconds, started_at=monotonic(), monotonic=monotonic)

    def remaining(self) -> float | None:
        if self.budget_seconds is None:
            return None
        return max(0.0, self.budget_seconds - (self.monotonic() - self.started_at))

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0

    def check(self, step: str) -> None:
        if self.expired:
            raise InvocationTimeoutError(
                f"Invocation budget of {self.budget_seconds}s exhausted before {step}"
            )
