"""Entry-point use cases: single-registration sync, sweep and status changes.

Provisioning always targets the Target Platform. Sync markers are written
back onto the Source Site copy of the registration, which is either the record
itself or the counterpart named by its ``foreign_id``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from enrolsync.domain.clock import utc_now
from enrolsync.domain.errors import (
    InvocationTimeoutError,
    LeaseUnavailableError,
    ProvisioningError,
    RecordNotFoundError,
    StoreError,
)
from enrolsync.domain.model import RegistrationStatus, StoreRole
from enrolsync.domain.reconciliation import (
    PropagationOutcome,
    locate_registration,
    propagate_status_change,
    sweep_registrations,
)

if TYPE_CHECKING:
    from uuid import UUID

    from enrolsync.domain.clock import Clock
    from enrolsync.domain.model import RegistrationRecord
    from enrolsync.domain.ports import RegistrationStore
    from enrolsync.domain.provisioning import ProvisioningChain, ProvisioningResult
    from enrolsync.domain.reconciliation import PropagationResult, StatusChange, SweepResult

log = getLogger(__name__)


class SyncOutcome(StrEnum):
    NOT_FOUND = "not_found"
    SKIPPED = "skipped"
    PROVISIONED = "provisioned"


@dataclass(slots=True)
class SyncResult:
    registration_id: UUID
    outcome: SyncOutcome
    message: str
    provisioning: ProvisioningResult | None = None
    written_back: bool = False
    errors: list[str] = field(default_factory=list[str])


@dataclass(slots=True)
class SweepReport:
    sweep: SweepResult
    provisioned: list[ProvisioningResult] = field(default_factory=list["ProvisioningResult"])
    errors: list[str] = field(default_factory=list[str])

    @property
    def message(self) -> str:
        return self.sweep.message


@dataclass(slots=True)
class StatusChangeResult:
    registration_id: UUID
    propagation: PropagationResult
    provisioning: ProvisioningResult | None = None
    errors: list[str] = field(default_factory=list[str])


class RegistrationSync:
    def __init__(
        self,
        *,
        source: RegistrationStore,
        target: RegistrationStore,
        chain: ProvisioningChain,
        clock: Clock = utc_now,
    ) -> None:
        self._source = source
        self._target = target
        self._chain = chain
        self._clock = clock

    def _store(self, role: StoreRole) -> RegistrationStore:
        return self._source if role is StoreRole.SOURCE else self._target

    def sync_registration(self, registration_id: UUID) -> SyncResult:
        """Provision one approved registration and mark its Source copy as synced."""

        located = locate_registration(registration_id, local=self._target, remote=self._source)
        try:
            record, store = located.require()
        except RecordNotFoundError as exc:
            log.info("%s; nothing to sync", exc)
            return SyncResult(registration_id, SyncOutcome.NOT_FOUND, str(exc))

        if not record.is_approved:
            message = f"Registration {registration_id} is {record.status}, not approved"
            log.info("%s; skipping provisioning", message)
            return SyncResult(registration_id, SyncOutcome.SKIPPED, message)

        provisioning = self._chain.run(record)
        result = SyncResult(
            registration_id,
            SyncOutcome.PROVISIONED,
            f"Registration {registration_id} provisioned for guardian {provisioning.guardian_id}",
            provisioning=provisioning,
            errors=list(provisioning.errors),
        )
        result.written_back = self._write_back(record, store.role, provisioning, result.errors)
        return result

    def sweep(self) -> SweepReport:
        """Reconcile Source into Target, then provision approvals still awaiting it.

        All provisioning in one sweep shares a single invocation budget. Once it
        is spent the remaining approvals are left for the next sweep.
        """

        deadline = self._chain.start_deadline()
        report = SweepReport(
            sweep_registrations(origin=self._source, mirror=self._target, clock=self._clock)
        )
        report.errors.extend(
            f"{failure.phase} {failure.registration_id}: {failure.message}"
            for failure in report.sweep.failures
        )
        pending = report.sweep.approvals
        for index, record in enumerate(pending):
            try:
                provisioning = self._chain.run(record, deadline=deadline)
            except InvocationTimeoutError as exc:
                deferred = len(pending) - index
                log.error("%s; %s approvals deferred to the next sweep", exc, deferred)
                report.errors.append(f"timeout: {exc}; {deferred} approvals deferred")
                break
            except (ProvisioningError, LeaseUnavailableError, StoreError) as exc:
                log.error("Provisioning failed for registration %s: %s", record.id, exc)
                report.errors.append(f"provision {record.id}: {exc}")
                continue
            report.provisioned.append(provisioning)
            report.errors.extend(provisioning.errors)
            self._write_back(record, StoreRole.SOURCE, provisioning, report.errors)
        return report

    def handle_status_change(
        self,
        change: StatusChange,
        *,
        changed_in: StoreRole,
    ) -> StatusChangeResult:
        """Push a review decision to the other store and provision on approval."""

        record = change.record
        propagation = propagate_status_change(
            change, remote=self._store(changed_in.other), clock=self._clock
        )
        result = StatusChangeResult(record.id, propagation)
        if not change.is_approval:
            return result
        if propagation.outcome is PropagationOutcome.COUNTERPART_MISSING:
            log.warning("Not provisioning %s: its origin registration is gone", record.id)
            return result

        provisioning = self._chain.run(record)
        result.provisioning = provisioning
        result.errors.extend(provisioning.errors)
        self._write_back(record, changed_in, provisioning, result.errors)
        return result

    def _write_back(
        self,
        record: RegistrationRecord,
        held_in: StoreRole,
        provisioning: ProvisioningResult,
        errors: list[str],
    ) -> bool:
        source_id = record.id if held_in is StoreRole.SOURCE else record.foreign_id
        if source_id is None:
            log.info("Registration %s has no Source Site copy; no markers written", record.id)
            return False

        values: dict[str, object] = {
            "status": RegistrationStatus.APPROVED,
            "synced_to_target": True,
            "synced_at": self._clock(),
            "target_guardian_id": provisioning.guardian_id,
        }
        if provisioning.student_id is not None:
            values["target_student_id"] = provisioning.student_id
        try:
            matched = self._source.update_fields(source_id, values)
        except StoreError as exc:
            log.error("Failed to write sync markers to Source registration %s: %s", source_id, exc)
            errors.append(f"write back {source_id}: {exc}")
            return False
        if not matched:
            log.warning("Source registration %s disappeared before write-back", source_id)
            return False
        log.info("Marked Source registration %s as synced", source_id)
        return True
