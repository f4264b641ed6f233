from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

from enrolsync.domain.model import ClassRoom, StudentStatus
from enrolsync.domain.provisioning import StudentEnroller
from tests.helpers.registrations import FIXED_NOW, ORGANIZATION_ID, fixed_clock, make_registration

if TYPE_CHECKING:
    from tests.helpers.provisioning import ProvisioningState


def _enroller(state: ProvisioningState) -> StudentEnroller:
    return StudentEnroller(unit_of_work_factory=state.unit_of_work, clock=fixed_clock)


def test_enroll_creates_student_with_payment_snapshot(
    provisioning_state: ProvisioningState,
) -> None:
    guardian_id = uuid4()
    registration = make_registration(registration_fee_paid=True, payment_verified=True)

    outcome = _enroller(provisioning_state).enroll(registration, guardian_id)

    assert outcome.created
    student = provisioning_state.students[outcome.student_id]
    assert student.guardian_id == guardian_id
    assert student.organization_id == ORGANIZATION_ID
    assert student.status is StudentStatus.ACTIVE
    assert student.enrollment_date == FIXED_NOW.date()
    assert student.registration_fee_amount == registration.registration_fee_amount
    assert student.registration_fee_paid
    assert student.payment_verified


def test_enroll_is_idempotent_on_natural_key(provisioning_state: ProvisioningState) -> None:
    guardian_id = uuid4()
    enroller = _enroller(provisioning_state)
    registration = make_registration()

    first = enroller.enroll(registration, guardian_id)
    second = enroller.enroll(registration, guardian_id)
    sibling = enroller.enroll(make_registration(student_first_name="Naledi"), guardian_id)

    assert not second.created
    assert second.student_id == first.student_id
    assert sibling.created
    assert len(provisioning_state.students) == 2


def test_assign_class_uses_first_class_by_name(provisioning_state: ProvisioningState) -> None:
    provisioning_state.classes.update(
        {
            room.id: room
            for room in (
                ClassRoom(organization_id=ORGANIZATION_ID, name="Sunflowers"),
                ClassRoom(organization_id=ORGANIZATION_ID, name="Butterflies"),
                ClassRoom(organization_id=uuid4(), name="Ants"),
            )
        }
    )
    student_id = uuid4()
    enroller = _enroller(provisioning_state)

    placement = enroller.assign_class(student_id, ORGANIZATION_ID)
    again = enroller.assign_class(student_id, ORGANIZATION_ID)

    assert placement is not None
    assert placement.created
    assert provisioning_state.classes[placement.class_id].name == "Butterflies"
    assert again is not None
    assert not again.created
    [assignment] = provisioning_state.assignments.values()
    assert assignment.start_date == FIXED_NOW.date()


def test_assign_class_without_classes_leaves_student_unassigned(
    provisioning_state: ProvisioningState,
) -> None:
    assert _enroller(provisioning_state).assign_class(uuid4(), ORGANIZATION_ID) is None
    assert provisioning_state.assignments == {}
