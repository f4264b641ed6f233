"""Push reviewer decisions made on a mirror back to its origin.

Only mirrors propagate. A record authored in the store where the review
happened is never pushed, which keeps two stores that both emit change events
from bouncing the same edit back and forth.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from enrolsync.domain.clock import utc_now
from enrolsync.domain.model import (
    TriggerOperation,
    is_approval_transition,
    is_review_transition,
)

from .apply import mirror_update_values

if TYPE_CHECKING:
    from uuid import UUID

    from enrolsync.domain.clock import Clock
    from enrolsync.domain.model import RegistrationRecord, RegistrationStatus
    from enrolsync.domain.ports import RegistrationStore

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StatusChange:
    """A row change reported by one store's trigger."""

    record: RegistrationRecord
    previous_status: RegistrationStatus | None
    operation: TriggerOperation = TriggerOperation.UPDATE

    @property
    def is_review_transition(self) -> bool:
        return (
            self.operation is TriggerOperation.UPDATE
            and self.previous_status is not None
            and is_review_transition(self.previous_status, self.record.status)
        )

    @property
    def is_approval(self) -> bool:
        return self.is_review_transition and is_approval_transition(
            self.previous_status, self.record.status
        )


class PropagationOutcome(StrEnum):
    IGNORED = "ignored"
    LOCAL_ORIGIN = "local_origin"
    COUNTERPART_MISSING = "counterpart_missing"
    IN_SYNC = "in_sync"
    PUSHED = "pushed"


@dataclass(frozen=True, slots=True)
class PropagationResult:
    outcome: PropagationOutcome
    counterpart_id: UUID | None = None
    fields: tuple[str, ...] = ()


def propagate_status_change(
    change: StatusChange,
    *,
    remote: RegistrationStore,
    clock: Clock = utc_now,
) -> PropagationResult:
    """Copy whitelisted review fields of a changed mirror onto its origin in ``remote``."""

    record = change.record
    if not change.is_review_transition:
        log.debug("Ignoring change on %s: not a review transition", record.id)
        return PropagationResult(PropagationOutcome.IGNORED)

    counterpart_id = record.origin_id
    if counterpart_id is None:
        log.info("Registration %s originated locally; not propagating", record.id)
        return PropagationResult(PropagationOutcome.LOCAL_ORIGIN)

    counterpart = remote.get(counterpart_id)
    if counterpart is None:
        log.warning(
            "Origin %s of mirror %s is gone from %s; the next sweep removes the mirror",
            counterpart_id,
            record.id,
            remote.role,
        )
        return PropagationResult(PropagationOutcome.COUNTERPART_MISSING, counterpart_id)

    values = mirror_update_values(record)
    # The origin's own fee flag is authoritative; the projection may have derived it.
    values["registration_fee_paid"] = record.registration_fee_paid
    differing = counterpart.differing_fields(values)
    if not differing:
        log.info("Origin %s already matches mirror %s", counterpart_id, record.id)
        return PropagationResult(PropagationOutcome.IN_SYNC, counterpart_id)

    changed_values: dict[str, object] = {name: values[name] for name in differing}
    changed_values["synced_at"] = clock()
    remote.update_fields(counterpart_id, changed_values)
    log.info(
        "Propagated status %s of mirror %s to %s registration %s",
        record.status,
        record.id,
        remote.role,
        counterpart_id,
    )
    return PropagationResult(PropagationOutcome.PUSHED, counterpart_id, differing)
