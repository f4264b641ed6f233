"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import delete, insert, or_, select, update

from enrolsync.adapters.sqlalchemy.mappings import (
    ai_tier_table,
    class_assignment_table,
    class_table,
    profile_table,
    provisioning_lease_table,
    registration_table,
    student_table,
)
from enrolsync.domain.model import (
    AiTierGrant,
    AiUsageTracker,
    ClassAssignment,
    ClassRoom,
    GuardianProfile,
    Organization,
    RegistrationRecord,
    StudentRecord,
)

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable, Mapping, Sequence
    from datetime import date, datetime

    from sqlalchemy.engine import CursorResult
    from sqlalchemy.orm import Session

    from enrolsync.domain.model import AccountRole


class SqlAlchemyRegistrationRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: RegistrationRecord) -> None:
        self.session.add(entity)

    def get(self, registration_id: uuid.UUID) -> RegistrationRecord | None:
        return self.session.get(RegistrationRecord, registration_id)

    def get_by_foreign_id(self, foreign_id: uuid.UUID) -> RegistrationRecord | None:
        stmt = select(RegistrationRecord).where(registration_table.c.foreign_id == foreign_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_all(self) -> Sequence[RegistrationRecord]:
        stmt = select(RegistrationRecord).order_by(
            registration_table.c.created_at, registration_table.c.id
        )
        return self.session.execute(stmt).scalars().all()

    def update_fields(self, registration_id: uuid.UUID, values: Mapping[str, object]) -> bool:
        if not values:
            return self.get(registration_id) is not None
        stmt = (
            update(registration_table)
            .where(registration_table.c.id == registration_id)
            .values(dict(values))
        )
        result = cast("CursorResult[object]", self.session.execute(stmt))
        return result.rowcount > 0

    def delete_many(self, registration_ids: Iterable[uuid.UUID]) -> int:
        ids = list(registration_ids)
        if not ids:
            return 0
        stmt = delete(registration_table).where(registration_table.c.id.in_(ids))
        result = cast("CursorResult[object]", self.session.execute(stmt))
        return result.rowcount


class SqlAlchemyGuardianProfileRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: GuardianProfile) -> None:
        self.session.add(entity)

    def get(self, profile_id: uuid.UUID) -> GuardianProfile | None:
        return self.session.get(GuardianProfile, profile_id)

    def find_by_email(self, email: str, *, role: AccountRole) -> GuardianProfile | None:
        stmt = (
            select(GuardianProfile)
            .where(profile_table.c.email == email)
            .where(profile_table.c.role == role)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyStudentRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: StudentRecord) -> None:
        self.session.add(entity)

    def find_by_natural_key(
        self,
        *,
        first_name: str,
        last_name: str,
        date_of_birth: date,
        guardian_id: uuid.UUID,
    ) -> StudentRecord | None:
        stmt = (
            select(StudentRecord)
            .where(student_table.c.first_name == first_name)
            .where(student_table.c.last_name == last_name)
            .where(student_table.c.date_of_birth == date_of_birth)
            .where(student_table.c.guardian_id == guardian_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyClassRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ClassRoom) -> None:
        self.session.add(entity)

    def first_for_organization(self, organization_id: uuid.UUID) -> ClassRoom | None:
        stmt = (
            select(ClassRoom)
            .where(class_table.c.organization_id == organization_id)
            .order_by(class_table.c.name, class_table.c.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyClassAssignmentRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ClassAssignment) -> None:
        self.session.add(entity)

    def find(self, *, class_id: uuid.UUID, student_id: uuid.UUID) -> ClassAssignment | None:
        stmt = (
            select(ClassAssignment)
            .where(class_assignment_table.c.class_id == class_id)
            .where(class_assignment_table.c.student_id == student_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyOrganizationRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Organization) -> None:
        self.session.add(entity)

    def get(self, organization_id: uuid.UUID) -> Organization | None:
        return self.session.get(Organization, organization_id)


class SqlAlchemyAiTierRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: AiTierGrant) -> None:
        self.session.add(entity)

    def find_for_user(self, user_id: uuid.UUID) -> AiTierGrant | None:
        stmt = select(AiTierGrant).where(ai_tier_table.c.user_id == user_id)
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyAiUsageRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: AiUsageTracker) -> None:
        self.session.add(entity)

    def get(self, user_id: uuid.UUID) -> AiUsageTracker | None:
        return self.session.get(AiUsageTracker, user_id)


class SqlAlchemyLeaseRepository:
    """Conditional-update lease: only a free, expired or self-held row can be taken."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def try_acquire(self, key: str, *, holder: str, now: datetime, expires_at: datetime) -> bool:
        table = provisioning_lease_table
        takeover = (
            update(table)
            .where(table.c.key == key)
            .where(or_(table.c.expires_at <= now, table.c.holder == holder))
            .values(holder=holder, acquired_at=now, expires_at=expires_at)
        )
        result = cast("CursorResult[object]", self.session.execute(takeover))
        if result.rowcount > 0:
            return True

        held = self.session.execute(select(table.c.key).where(table.c.key == key)).first()
        if held is not None:
            return False

        # A concurrent insert surfaces as an IntegrityError on flush or commit.
        self.session.execute(
            insert(table).values(key=key, holder=holder, acquired_at=now, expires_at=expires_at)
        )
        return True

    def release(self, key: str, *, holder: str) -> None:
        table = provisioning_lease_table
        self.session.execute(
            delete(table).where(table.c.key == key).where(table.c.holder == holder)
        )
