"""Apply a classification to the mirror store.

Batches run insert, update, delete in that order so a crash between batches
leaves the mirror under-applied but never over-applied. Every batch is safe to
re-run: inserts are keyed by foreign id, updates are idempotent writes and
deletes of already-missing ids match nothing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from enrolsync.domain.clock import utc_now
from enrolsync.domain.errors import DuplicateRecordError, StoreError
from enrolsync.domain.model import MIRRORED_FIELDS

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from enrolsync.domain.clock import Clock
    from enrolsync.domain.model import RegistrationRecord
    from enrolsync.domain.ports import RegistrationStore

    from .detect import Classification, RecordChange

log = getLogger(__name__)


class ReconcilePhase(StrEnum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    WRITE_BACK = "write_back"


@dataclass(frozen=True, slots=True)
class RowFailure:
    registration_id: UUID
    phase: ReconcilePhase
    message: str


@dataclass(slots=True)
class ReconcileResult:
    """Summary of the writes performed for one classification."""

    inserted: int = 0
    already_present: int = 0
    updated: int = 0
    deleted: int = 0
    failures: list[RowFailure] = field(default_factory=list["RowFailure"])
    applied: list[RecordChange] = field(default_factory=list["RecordChange"])


class Reconciler:
    """Mirror origin-store records into the mirror store.

    The origin is authoritative. The only writes it receives are sync markers
    pointing at the mirror row; reviewer-authored fields there are never touched.
    """

    def __init__(
        self,
        *,
        origin: RegistrationStore,
        mirror: RegistrationStore,
        clock: Clock = utc_now,
    ) -> None:
        self._origin = origin
        self._mirror = mirror
        self._clock = clock

    def apply(self, classification: Classification) -> ReconcileResult:
        result = ReconcileResult()
        self._insert_new(classification.new, result)
        self._update_changed(classification.changed, result)
        self._repair_markers([*classification.changed, *classification.unchanged], result)
        self._delete_orphans(classification.orphaned, result)
        log.info(
            "Reconciled %s -> %s: inserted=%s, already_present=%s, updated=%s, deleted=%s, "
            "failures=%s",
            self._origin.role,
            self._mirror.role,
            result.inserted,
            result.already_present,
            result.updated,
            result.deleted,
            len(result.failures),
        )
        return result

    def _insert_new(self, changes: Sequence[RecordChange], result: ReconcileResult) -> None:
        for change in changes:
            record = change.record
            now = self._clock()
            try:
                mirror = self._ensure_mirror(record, now, result)
            except StoreError as exc:
                log.warning("Failed to insert mirror for registration %s: %s", record.id, exc)
                result.failures.append(RowFailure(record.id, ReconcilePhase.INSERT, str(exc)))
                continue
            result.applied.append(change)
            if change.is_approval:
                log.info("Mirrored approved registration %s", record.id)
            self._write_back(record, mirror, now, result)

    def _ensure_mirror(
        self,
        record: RegistrationRecord,
        now: datetime,
        result: ReconcileResult,
    ) -> RegistrationRecord:
        existing = self._mirror.get_by_foreign_id(record.id)
        if existing is not None:
            result.already_present += 1
            return existing

        mirror = record.mirror_copy(synced_at=now)
        try:
            self._mirror.add(mirror)
        except DuplicateRecordError:
            # A concurrent sweep inserted the same foreign id first.
            existing = self._mirror.get_by_foreign_id(record.id)
            if existing is None:
                raise
            result.already_present += 1
            return existing
        result.inserted += 1
        log.debug("Inserted mirror %s for registration %s", mirror.id, record.id)
        return mirror

    def _write_back(
        self,
        record: RegistrationRecord,
        mirror: RegistrationRecord,
        now: datetime,
        result: ReconcileResult,
    ) -> None:
        if record.foreign_id == mirror.id and record.synced_to_target:
            return
        values: dict[str, object] = {
            "foreign_id": mirror.id,
            "synced_to_target": True,
            "synced_at": now,
        }
        try:
            self._origin.update_fields(record.id, values)
        except StoreError as exc:
            # The mirror exists; the next pass repairs the markers.
            log.warning("Failed to write sync markers to registration %s: %s", record.id, exc)
            result.failures.append(RowFailure(record.id, ReconcilePhase.WRITE_BACK, str(exc)))

    def _repair_markers(self, changes: Sequence[RecordChange], result: ReconcileResult) -> None:
        for change in changes:
            if change.mirror is not None:
                self._write_back(change.record, change.mirror, self._clock(), result)

    def _update_changed(self, changes: Sequence[RecordChange], result: ReconcileResult) -> None:
        for change in changes:
            mirror = change.mirror
            if mirror is None:
                continue
            values = mirror_update_values(change.record, change.changed_fields)
            values["synced_at"] = self._clock()
            try:
                matched = self._mirror.update_fields(mirror.id, values)
            except StoreError as exc:
                log.warning("Failed to update mirror %s: %s", mirror.id, exc)
                result.failures.append(
                    RowFailure(change.record.id, ReconcilePhase.UPDATE, str(exc))
                )
                continue
            if not matched:
                log.warning("Mirror %s vanished before update; it will be re-inserted", mirror.id)
                result.failures.append(
                    RowFailure(change.record.id, ReconcilePhase.UPDATE, "mirror row not found")
                )
                continue
            result.updated += 1
            result.applied.append(change)
            log.debug("Updated mirror %s fields %s", mirror.id, ", ".join(change.changed_fields))
            if change.is_approval:
                log.info("Mirrored approval of registration %s", change.record.id)

    def _delete_orphans(
        self,
        orphans: Sequence[RegistrationRecord],
        result: ReconcileResult,
    ) -> None:
        if not orphans:
            log.info("No orphaned mirrors to delete")
            return
        orphan_ids = [orphan.id for orphan in orphans]
        log.info("Deleting %s orphaned mirrors: %s", len(orphan_ids), orphan_ids)
        try:
            result.deleted = self._mirror.delete_many(orphan_ids)
        except StoreError as exc:
            log.warning("Failed to delete orphaned mirrors, retrying next sweep: %s", exc)
            result.failures.extend(
                RowFailure(orphan_id, ReconcilePhase.DELETE, str(exc)) for orphan_id in orphan_ids
            )


def mirror_update_values(
    record: RegistrationRecord,
    field_names: Sequence[str] = MIRRORED_FIELDS,
) -> dict[str, object]:
    """Whitelisted values to write onto a mirror; unknown names are dropped."""

    projected = record.mirrored_values()
    return {name: projected[name] for name in field_names if name in projected}
