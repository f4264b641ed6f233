"""Full-table reconciliation pass between an origin and a mirror store."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from enrolsync.domain.clock import utc_now

from .apply import ReconcilePhase, Reconciler, RowFailure
from .detect import classify_records

if TYPE_CHECKING:
    from enrolsync.domain.clock import Clock
    from enrolsync.domain.model import RegistrationRecord
    from enrolsync.domain.ports import RegistrationStore

    from .apply import ReconcileResult
    from .detect import Classification

log = getLogger(__name__)


@dataclass(slots=True)
class SweepResult:
    synced: int = 0
    updated: int = 0
    deleted: int = 0
    total_in_origin: int = 0
    total_in_mirror_before: int = 0
    failures: list[RowFailure] = field(default_factory=list["RowFailure"])
    approvals: list[RegistrationRecord] = field(default_factory=list["RegistrationRecord"])

    @property
    def message(self) -> str:
        return f"Synced {self.synced} new, updated {self.updated}, deleted {self.deleted} records"


def _awaiting_provisioning(
    classification: Classification,
    outcome: ReconcileResult,
) -> list[RegistrationRecord]:
    # Rows whose mirror could not be written wait for the next pass.
    failed = {
        failure.registration_id
        for failure in outcome.failures
        if failure.phase in {ReconcilePhase.INSERT, ReconcilePhase.UPDATE}
    }
    candidates = [*classification.new, *classification.changed, *classification.unchanged]
    return [
        change.record
        for change in candidates
        if change.record.awaits_provisioning and change.record.id not in failed
    ]


def sweep_registrations(
    *,
    origin: RegistrationStore,
    mirror: RegistrationStore,
    clock: Clock = utc_now,
) -> SweepResult:
    """Load both sides, classify, and apply.

    ``approvals`` lists every approved origin record that has a mirror and no
    guardian account recorded yet, whether it changed in this pass or not, so an
    approval whose provisioning failed earlier is picked up again. The caller
    decides whether to provision them. Load failures propagate and fail the
    whole sweep.
    """

    log.info("Starting registration sweep %s -> %s", origin.role, mirror.role)
    origin_records = list(origin.list_all())
    mirror_records = list(mirror.list_all())
    log.info(
        "Loaded %s registrations from %s and %s from %s",
        len(origin_records),
        origin.role,
        len(mirror_records),
        mirror.role,
    )

    classification = classify_records(origin_records, mirror_records)
    outcome = Reconciler(origin=origin, mirror=mirror, clock=clock).apply(classification)

    result = SweepResult(
        synced=outcome.inserted,
        updated=outcome.updated,
        deleted=outcome.deleted,
        total_in_origin=len(origin_records),
        total_in_mirror_before=len(mirror_records),
        failures=outcome.failures,
        approvals=_awaiting_provisioning(classification, outcome),
    )
    log.info("Finished registration sweep: %s", result.message)
    return result
