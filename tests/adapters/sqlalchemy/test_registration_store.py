from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from enrolsync.domain.errors import DuplicateRecordError
from enrolsync.domain.model import RegistrationStatus, StoreRole
from enrolsync.domain.ports import RegistrationStore
from tests.helpers.registrations import FIXED_NOW, approve, make_registration

if TYPE_CHECKING:
    from enrolsync.adapters.sqlalchemy import SqlAlchemyRegistrationStore

type StorePair = tuple[SqlAlchemyRegistrationStore, SqlAlchemyRegistrationStore]


def test_store_satisfies_port(sqlite_stores: StorePair) -> None:
    source, target = sqlite_stores

    assert isinstance(source, RegistrationStore)
    assert source.role is StoreRole.SOURCE
    assert target.role is StoreRole.TARGET


def test_add_and_get_round_trip(sqlite_stores: StorePair) -> None:
    source, _ = sqlite_stores
    record = make_registration(discount_amount=Decimal("50.00"))
    approve(record)

    source.add(record)
    loaded = source.get(record.id)

    assert loaded is not None
    assert loaded.guardian_email == record.guardian_email
    assert loaded.student_dob == record.student_dob
    assert loaded.status is RegistrationStatus.APPROVED
    assert loaded.reviewed_at == FIXED_NOW
    assert loaded.registration_fee_amount == Decimal("350.00")
    assert not loaded.mirrored


def test_stores_are_independent(sqlite_stores: StorePair) -> None:
    source, target = sqlite_stores
    record = make_registration()

    source.add(record)

    assert target.get(record.id) is None
    assert target.list_all() == []


def test_foreign_id_is_unique(sqlite_stores: StorePair) -> None:
    _, target = sqlite_stores
    origin = make_registration()
    target.add(origin.mirror_copy(synced_at=FIXED_NOW))

    with pytest.raises(DuplicateRecordError):
        target.add(origin.mirror_copy(synced_at=FIXED_NOW))

    mirror = target.get_by_foreign_id(origin.id)
    assert mirror is not None
    assert mirror.mirrored


def test_update_fields_reports_matches(sqlite_stores: StorePair) -> None:
    source, _ = sqlite_stores
    record = make_registration()
    source.add(record)
    guardian_id = uuid4()

    matched = source.update_fields(
        record.id,
        {
            "status": RegistrationStatus.APPROVED,
            "synced_to_target": True,
            "synced_at": FIXED_NOW,
            "target_guardian_id": guardian_id,
        },
    )
    missing = source.update_fields(uuid4(), {"synced_to_target": True})

    assert matched
    assert not missing
    assert source.update_fields(record.id, {})
    loaded = source.get(record.id)
    assert loaded is not None
    assert loaded.status is RegistrationStatus.APPROVED
    assert loaded.target_guardian_id == guardian_id
    assert loaded.synced_at == FIXED_NOW


def test_delete_many_ignores_missing_ids(sqlite_stores: StorePair) -> None:
    _, target = sqlite_stores
    kept = make_registration()
    dropped = make_registration(guardian_email="dropped@example.com")
    target.add(kept)
    target.add(dropped)

    deleted = target.delete_many([dropped.id, uuid4()])

    assert deleted == 1
    assert [record.id for record in target.list_all()] == [kept.id]
    assert target.delete_many([]) == 0
