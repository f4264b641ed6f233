"""Builders and an in-memory store for registration tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from enrolsync.domain.errors import DuplicateRecordError, StoreError
from enrolsync.domain.model import RegistrationRecord, RegistrationStatus, StoreRole

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

ORGANIZATION_ID = UUID("00000000-0000-4000-8000-000000000001")
FIXED_NOW = datetime(2026, 1, 15, 9, 30, tzinfo=UTC)


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_registration(**overrides: object) -> RegistrationRecord:
    """Create a pending registration with realistic defaults."""

    values: dict[str, object] = {
        "organization_id": ORGANIZATION_ID,
        "guardian_name": "Thandi Mokoena",
        "guardian_email": "thandi@example.com",
        "guardian_phone": "+27 82 555 0101",
        "guardian_address": "12 Jacaranda Street, Pretoria",
        "student_first_name": "Lerato",
        "student_last_name": "Mokoena",
        "student_dob": date(2021, 3, 4),
        "student_gender": "female",
        "registration_fee_amount": Decimal("350.00"),
        "created_at": datetime(2026, 1, 10, 8, 0, tzinfo=UTC),
    }
    values.update(overrides)
    return RegistrationRecord(**values)  # pyright: ignore[reportArgumentType]


def approve(record: RegistrationRecord, *, reviewer: str = "principal@school.test") -> None:
    record.status = RegistrationStatus.APPROVED
    record.reviewed_by = reviewer
    record.reviewed_at = FIXED_NOW


class InMemoryRegistrationStore:
    """``RegistrationStore`` keeping detached copies, with failure injection.

    ``fail_add_for`` holds origin ids whose mirror insert should fail;
    ``fail_update_for`` holds row ids whose update should fail.
    """

    def __init__(self, role: StoreRole, records: Iterable[RegistrationRecord] = ()) -> None:
        self._role = role
        self.rows: dict[UUID, RegistrationRecord] = {}
        self.fail_add_for: set[UUID] = set()
        self.fail_update_for: set[UUID] = set()
        self.fail_deletes = False
        self.update_calls: list[tuple[UUID, dict[str, object]]] = []
        self.deleted_batches: list[list[UUID]] = []
        for record in records:
            self.rows[record.id] = replace(record)

    @property
    def role(self) -> StoreRole:
        return self._role

    def get(self, registration_id: UUID) -> RegistrationRecord | None:
        row = self.rows.get(registration_id)
        return replace(row) if row is not None else None

    def get_by_foreign_id(self, foreign_id: UUID) -> RegistrationRecord | None:
        for row in self.rows.values():
            if row.foreign_id == foreign_id:
                return replace(row)
        return None

    def list_all(self) -> Sequence[RegistrationRecord]:
        return [replace(row) for row in self.rows.values()]

    def add(self, record: RegistrationRecord) -> None:
        if record.foreign_id is not None and record.foreign_id in self.fail_add_for:
            raise StoreError(f"insert rejected for {record.foreign_id}")
        if record.id in self.rows:
            raise DuplicateRecordError(f"duplicate id {record.id}")
        if record.foreign_id is not None and self.get_by_foreign_id(record.foreign_id):
            raise DuplicateRecordError(f"duplicate foreign id {record.foreign_id}")
        self.rows[record.id] = replace(record)

    def update_fields(self, registration_id: UUID, values: Mapping[str, object]) -> bool:
        if registration_id in self.fail_update_for:
            raise StoreError(f"update rejected for {registration_id}")
        self.update_calls.append((registration_id, dict(values)))
        row = self.rows.get(registration_id)
        if row is None:
            return False
        for name, value in values.items():
            setattr(row, name, value)
        return True

    def delete_many(self, registration_ids: Iterable[UUID]) -> int:
        ids = list(registration_ids)
        if self.fail_deletes:
            raise StoreError("delete rejected")
        self.deleted_batches.append(ids)
        deleted = 0
        for registration_id in ids:
            if self.rows.pop(registration_id, None) is not None:
                deleted += 1
        return deleted

    def mirror_of(self, origin_id: UUID) -> RegistrationRecord | None:
        return self.get_by_foreign_id(origin_id)

    def new_id(self) -> UUID:
        return uuid4()
