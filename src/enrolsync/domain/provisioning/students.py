"""Student creation and placeholder class placement."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from enrolsync.domain.clock import utc_now, utc_today
from enrolsync.domain.errors import DuplicateRecordError
from enrolsync.domain.model import ClassAssignment, StudentRecord, StudentStatus

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from enrolsync.domain.clock import Clock
    from enrolsync.domain.model import RegistrationRecord
    from enrolsync.domain.ports import ProvisioningUnitOfWork

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StudentOutcome:
    student_id: UUID
    created: bool


@dataclass(frozen=True, slots=True)
class ClassPlacement:
    class_id: UUID
    student_id: UUID
    created: bool


class StudentEnroller:
    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], ProvisioningUnitOfWork],
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._clock = clock

    def enroll(self, registration: RegistrationRecord, guardian_id: UUID) -> StudentOutcome:
        """Find the student by natural key or create it with the payment snapshot."""

        existing = self._find(registration, guardian_id)
        if existing is not None:
            log.info("Student %s already exists for guardian %s", existing.id, guardian_id)
            return StudentOutcome(existing.id, created=False)

        student = StudentRecord(
            first_name=registration.student_first_name,
            last_name=registration.student_last_name,
            date_of_birth=registration.student_dob,
            gender=registration.student_gender,
            organization_id=registration.organization_id,
            guardian_id=guardian_id,
            status=StudentStatus.ACTIVE,
            is_active=True,
            enrollment_date=utc_today(self._clock),
            registration_fee_amount=registration.registration_fee_amount,
            registration_fee_paid=registration.registration_fee_paid,
            payment_verified=registration.payment_verified,
            payment_date=registration.payment_date,
        )
        try:
            with self._uow_factory() as uow:
                uow.repositories.students.add(student)
                uow.commit()
        except DuplicateRecordError:
            existing = self._find(registration, guardian_id)
            if existing is None:
                raise
            log.info("Student %s was created concurrently", existing.id)
            return StudentOutcome(existing.id, created=False)

        log.info("Created student %s for guardian %s", student.id, guardian_id)
        return StudentOutcome(student.id, created=True)

    def assign_class(self, student_id: UUID, organization_id: UUID) -> ClassPlacement | None:
        """Place the student in the organization's first class, if it has any.

        The chosen class is a placeholder so the student is visible somewhere;
        there is no age-group matching.
        """

        today = utc_today(self._clock)
        with self._uow_factory() as uow:
            repos = uow.repositories
            classroom = repos.classes.first_for_organization(organization_id)
            if classroom is None:
                log.info(
                    "Organization %s has no classes; student %s unassigned",
                    organization_id,
                    student_id,
                )
                return None
            if repos.class_assignments.find(class_id=classroom.id, student_id=student_id):
                log.info("Student %s already assigned to class %s", student_id, classroom.id)
                return ClassPlacement(classroom.id, student_id, created=False)
            repos.class_assignments.add(
                ClassAssignment(
                    class_id=classroom.id,
                    student_id=student_id,
                    assigned_date=today,
                    start_date=today,
                )
            )
            uow.commit()
        log.info("Assigned student %s to class %s", student_id, classroom.id)
        return ClassPlacement(classroom.id, student_id, created=True)

    def _find(self, registration: RegistrationRecord, guardian_id: UUID) -> StudentRecord | None:
        with self._uow_factory() as uow:
            return uow.repositories.students.find_by_natural_key(
                first_name=registration.student_first_name,
                last_name=registration.student_last_name,
                date_of_birth=registration.student_dob,
                guardian_id=guardian_id,
            )
