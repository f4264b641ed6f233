"""Enrolled children, organizations and class placement."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from enrolsync.domain.model.enums import StudentStatus

if TYPE_CHECKING:
    from datetime import date
    from decimal import Decimal


@dataclass(eq=False, kw_only=True)
class Organization:
    id: UUID
    name: str


@dataclass(eq=False, kw_only=True)
class StudentRecord:
    """A child enrolled under a guardian.

    Identity for retries is the natural key (first name, last name, birth date,
    guardian), never an external id.
    """

    id: UUID = field(default_factory=uuid4)
    first_name: str
    last_name: str
    date_of_birth: date
    gender: str | None = None
    organization_id: UUID
    guardian_id: UUID
    status: StudentStatus = StudentStatus.ACTIVE
    is_active: bool = True
    enrollment_date: date

    registration_fee_amount: Decimal | None = None
    registration_fee_paid: bool = False
    payment_verified: bool = False
    payment_date: date | None = None

    @property
    def natural_key(self) -> tuple[str, str, date, UUID]:
        return (self.first_name, self.last_name, self.date_of_birth, self.guardian_id)


@dataclass(eq=False, kw_only=True)
class ClassRoom:
    id: UUID = field(default_factory=uuid4)
    organization_id: UUID
    name: str


@dataclass(eq=False, kw_only=True)
class ClassAssignment:
    id: UUID = field(default_factory=uuid4)
    class_id: UUID
    student_id: UUID
    assigned_date: date
    start_date: date
    status: StudentStatus = StudentStatus.ACTIVE
