from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from enrolsync.domain.errors import DuplicateRecordError
from enrolsync.domain.model import (
    AccountRole,
    AiTierGrant,
    AiUsageTracker,
    ClassAssignment,
    ClassRoom,
    GuardianProfile,
    Organization,
    StudentRecord,
)
from tests.helpers.registrations import FIXED_NOW, ORGANIZATION_ID

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from enrolsync.adapters.sqlalchemy import SqlAlchemyProvisioningUnitOfWork

type UowFactory = Callable[[], SqlAlchemyProvisioningUnitOfWork]


def _add_guardian(factory: UowFactory) -> UUID:
    guardian_id = uuid4()
    with factory() as uow:
        uow.repositories.organizations.add(Organization(id=ORGANIZATION_ID, name="Little Acorns"))
        uow.repositories.profiles.add(
            GuardianProfile(id=guardian_id, auth_user_id=guardian_id, email="thandi@example.com")
        )
        uow.commit()
    return guardian_id


def test_profile_lookup_by_email_and_role(target_unit_of_work: UowFactory) -> None:
    guardian_id = _add_guardian(target_unit_of_work)

    with target_unit_of_work() as uow:
        profiles = uow.repositories.profiles
        found = profiles.find_by_email("thandi@example.com", role=AccountRole.PARENT)
        missing = profiles.find_by_email("other@example.com", role=AccountRole.PARENT)

    assert found is not None
    assert found.id == guardian_id
    assert missing is None


def test_profile_changes_persist_on_commit(target_unit_of_work: UowFactory) -> None:
    guardian_id = _add_guardian(target_unit_of_work)

    with target_unit_of_work() as uow:
        profile = uow.repositories.profiles.get(guardian_id)
        assert profile is not None
        profile.trial_granted_at = FIXED_NOW
        profile.seat_status = "active"
        uow.commit()

    with target_unit_of_work() as uow:
        stored = uow.repositories.profiles.get(guardian_id)
        assert stored is not None
        assert stored.has_trial
        assert stored.trial_granted_at == FIXED_NOW
        assert stored.seat_status == "active"


def test_student_natural_key_is_unique(target_unit_of_work: UowFactory) -> None:
    guardian_id = _add_guardian(target_unit_of_work)

    def student() -> StudentRecord:
        return StudentRecord(
            first_name="Lerato",
            last_name="Mokoena",
            date_of_birth=date(2021, 3, 4),
            organization_id=ORGANIZATION_ID,
            guardian_id=guardian_id,
            enrollment_date=FIXED_NOW.date(),
        )

    with target_unit_of_work() as uow:
        uow.repositories.students.add(student())
        uow.commit()

    with pytest.raises(DuplicateRecordError), target_unit_of_work() as uow:
        uow.repositories.students.add(student())
        uow.commit()

    with target_unit_of_work() as uow:
        found = uow.repositories.students.find_by_natural_key(
            first_name="Lerato",
            last_name="Mokoena",
            date_of_birth=date(2021, 3, 4),
            guardian_id=guardian_id,
        )
    assert found is not None


def test_first_class_and_assignment_lookup(target_unit_of_work: UowFactory) -> None:
    _add_guardian(target_unit_of_work)
    student_id = uuid4()
    with target_unit_of_work() as uow:
        for name in ("Sunflowers", "Butterflies"):
            uow.repositories.classes.add(ClassRoom(organization_id=ORGANIZATION_ID, name=name))
        uow.commit()

    with target_unit_of_work() as uow:
        first = uow.repositories.classes.first_for_organization(ORGANIZATION_ID)
        assert first is not None
        assert uow.repositories.classes.first_for_organization(uuid4()) is None
        uow.repositories.class_assignments.add(
            ClassAssignment(
                class_id=first.id,
                student_id=student_id,
                assigned_date=FIXED_NOW.date(),
                start_date=FIXED_NOW.date(),
            )
        )
        uow.commit()
        class_id = first.id

    with target_unit_of_work() as uow:
        assignment = uow.repositories.class_assignments.find(
            class_id=class_id, student_id=student_id
        )
        classroom = uow.repositories.classes.first_for_organization(ORGANIZATION_ID)

    assert assignment is not None
    assert classroom is not None
    assert classroom.name == "Butterflies"


def test_tier_and_usage_rows(target_unit_of_work: UowFactory) -> None:
    guardian_id = _add_guardian(target_unit_of_work)

    with target_unit_of_work() as uow:
        uow.repositories.ai_tiers.add(
            AiTierGrant(
                user_id=guardian_id,
                tier="parent_plus",
                assigned_reason="7-day trial - parent_plus tier",
                expires_at=FIXED_NOW + timedelta(days=7),
            )
        )
        uow.repositories.ai_usage.add(AiUsageTracker(user_id=guardian_id, current_tier="free"))
        uow.commit()

    with target_unit_of_work() as uow:
        grant = uow.repositories.ai_tiers.find_for_user(guardian_id)
        usage = uow.repositories.ai_usage.get(guardian_id)

    assert grant is not None
    assert grant.expires_at == FIXED_NOW + timedelta(days=7)
    assert usage is not None
    assert usage.current_tier == "free"


def test_lease_acquire_release_and_takeover(target_unit_of_work: UowFactory) -> None:
    key = "thandi@example.com"
    later = FIXED_NOW + timedelta(seconds=30)
    expiry = FIXED_NOW + timedelta(seconds=60)

    def acquire(holder: str, now: datetime = FIXED_NOW) -> bool:
        with target_unit_of_work() as uow:
            acquired = uow.repositories.leases.try_acquire(
                key, holder=holder, now=now, expires_at=expiry
            )
            uow.commit()
        return acquired

    assert acquire("a")
    assert acquire("a", later)
    assert not acquire("b", later)
    assert acquire("b", expiry + timedelta(seconds=1))

    with target_unit_of_work() as uow:
        uow.repositories.leases.release(key, holder="a")
        uow.commit()
    assert not acquire("c", later)

    with target_unit_of_work() as uow:
        uow.repositories.leases.release(key, holder="b")
        uow.commit()
    assert acquire("c", later)
