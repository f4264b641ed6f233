from __future__ import annotations

from typing import TYPE_CHECKING

from enrolsync.domain.model import RegistrationStatus, StoreRole
from enrolsync.domain.reconciliation import (
    ReconcilePhase,
    Reconciler,
    classify_records,
    mirror_update_values,
)
from tests.helpers.registrations import (
    FIXED_NOW,
    InMemoryRegistrationStore,
    approve,
    fixed_clock,
    make_registration,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from enrolsync.domain.model import RegistrationRecord
    from enrolsync.domain.reconciliation import ReconcileResult


def _stores(
    *origin_records: RegistrationRecord,
    mirror_records: Sequence[RegistrationRecord] = (),
) -> tuple[InMemoryRegistrationStore, InMemoryRegistrationStore]:
    origin = InMemoryRegistrationStore(StoreRole.SOURCE, origin_records)
    mirror = InMemoryRegistrationStore(StoreRole.TARGET, mirror_records)
    return origin, mirror


def _apply(origin: InMemoryRegistrationStore, mirror: InMemoryRegistrationStore) -> ReconcileResult:
    classification = classify_records(origin.list_all(), mirror.list_all())
    return Reconciler(origin=origin, mirror=mirror, clock=fixed_clock).apply(classification)


def test_insert_creates_mirror_and_writes_markers_back() -> None:
    record = make_registration()
    origin, mirror = _stores(record)

    result = _apply(origin, mirror)

    assert result.inserted == 1
    inserted = mirror.mirror_of(record.id)
    assert inserted is not None
    assert inserted.mirrored
    assert inserted.guardian_email == record.guardian_email
    assert inserted.synced_at == FIXED_NOW

    stored_origin = origin.get(record.id)
    assert stored_origin is not None
    assert stored_origin.foreign_id == inserted.id
    assert stored_origin.synced_to_target
    assert stored_origin.synced_at == FIXED_NOW


def test_second_pass_is_a_no_op() -> None:
    origin, mirror = _stores(make_registration(), make_registration(guardian_email="b@x.test"))

    _apply(origin, mirror)
    origin.update_calls.clear()
    second = _apply(origin, mirror)

    assert (second.inserted, second.updated, second.deleted) == (0, 0, 0)
    assert len(mirror.rows) == 2
    assert origin.update_calls == []


def test_existing_mirror_found_by_foreign_id_is_not_duplicated() -> None:
    record = make_registration()
    unflagged = record.mirror_copy(synced_at=FIXED_NOW)
    unflagged.mirrored = False
    origin, mirror = _stores(record, mirror_records=[unflagged])

    result = _apply(origin, mirror)

    assert result.inserted == 0
    assert result.already_present == 1
    assert len(mirror.rows) == 1
    stored_origin = origin.get(record.id)
    assert stored_origin is not None
    assert stored_origin.foreign_id == unflagged.id


def test_update_writes_only_changed_whitelisted_fields() -> None:
    record = make_registration()
    origin, mirror = _stores(record)
    _apply(origin, mirror)

    origin.rows[record.id].guardian_phone = "+27 11 999 9999"
    approve(origin.rows[record.id])
    mirror.update_calls.clear()
    result = _apply(origin, mirror)

    assert result.updated == 1
    [(mirror_id, values)] = mirror.update_calls
    assert set(values) == {"status", "reviewed_by", "reviewed_at", "synced_at"}
    stored_mirror = mirror.get(mirror_id)
    assert stored_mirror is not None
    assert stored_mirror.status is RegistrationStatus.APPROVED
    assert stored_mirror.guardian_phone == record.guardian_phone
    assert [change.is_approval for change in result.applied] == [True]


def test_update_preserves_mirror_only_fields() -> None:
    record = make_registration()
    origin, mirror = _stores(record)
    _apply(origin, mirror)
    mirror_row = mirror.mirror_of(record.id)
    assert mirror_row is not None
    mirror.rows[mirror_row.id].target_student_id = record.id

    origin.rows[record.id].payment_verified = True
    _apply(origin, mirror)

    updated = mirror.get(mirror_row.id)
    assert updated is not None
    assert updated.payment_verified
    assert updated.target_student_id == record.id


def test_orphans_are_deleted_in_one_batch() -> None:
    first = make_registration()
    second = make_registration(guardian_email="second@example.com")
    origin, mirror = _stores(first, second)
    _apply(origin, mirror)

    origin.rows.clear()
    result = _apply(origin, mirror)

    assert result.deleted == 2
    assert len(mirror.deleted_batches) == 1
    assert mirror.rows == {}


def test_row_failures_do_not_stop_the_batch() -> None:
    failing = make_registration(guardian_email="fails@example.com")
    healthy = make_registration(guardian_email="healthy@example.com")
    origin, mirror = _stores(failing, healthy)
    mirror.fail_add_for.add(failing.id)

    result = _apply(origin, mirror)

    assert result.inserted == 1
    assert [(f.registration_id, f.phase) for f in result.failures] == [
        (failing.id, ReconcilePhase.INSERT)
    ]
    assert mirror.mirror_of(healthy.id) is not None


def test_write_back_failure_is_repaired_on_the_next_pass() -> None:
    record = make_registration()
    origin, mirror = _stores(record)
    origin.fail_update_for.add(record.id)

    result = _apply(origin, mirror)

    assert result.inserted == 1
    assert [f.phase for f in result.failures] == [ReconcilePhase.WRITE_BACK]

    origin.fail_update_for.clear()
    retry = _apply(origin, mirror)
    assert retry.inserted == 0
    assert retry.failures == []
    assert len(mirror.rows) == 1
    stored_origin = origin.get(record.id)
    stored_mirror = mirror.mirror_of(record.id)
    assert stored_origin is not None
    assert stored_mirror is not None
    assert stored_origin.foreign_id == stored_mirror.id
    assert stored_origin.synced_to_target


def test_delete_failure_is_reported_per_orphan() -> None:
    record = make_registration()
    origin, mirror = _stores(record)
    _apply(origin, mirror)
    origin.rows.clear()
    mirror.fail_deletes = True

    result = _apply(origin, mirror)

    assert result.deleted == 0
    assert [f.phase for f in result.failures] == [ReconcilePhase.DELETE]
    assert len(mirror.rows) == 1


def test_mirror_update_values_drops_unknown_fields() -> None:
    record = make_registration()

    values = mirror_update_values(record, ("status", "guardian_email"))

    assert values == {"status": RegistrationStatus.PENDING}
