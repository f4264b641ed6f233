"""Ports for persisting Target Platform aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from datetime import date, datetime
    from uuid import UUID

    from enrolsync.domain.model import (
        AccountRole,
        AiTierGrant,
        AiUsageTracker,
        ClassAssignment,
        ClassRoom,
        GuardianProfile,
        Organization,
        RegistrationRecord,
        StudentRecord,
    )


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class RegistrationRepository(Repository["RegistrationRecord"], Protocol):
    def get(self, registration_id: UUID) -> RegistrationRecord | None: ...

    def get_by_foreign_id(self, foreign_id: UUID) -> RegistrationRecord | None: ...

    def list_all(self) -> Sequence[RegistrationRecord]: ...

    def update_fields(self, registration_id: UUID, values: Mapping[str, object]) -> bool: ...

    def delete_many(self, registration_ids: Iterable[UUID]) -> int: ...


@runtime_checkable
class GuardianProfileRepository(Repository["GuardianProfile"], Protocol):
    def get(self, profile_id: UUID) -> GuardianProfile | None: ...

    def find_by_email(self, email: str, *, role: AccountRole) -> GuardianProfile | None: ...


@runtime_checkable
class StudentRepository(Repository["StudentRecord"], Protocol):
    def find_by_natural_key(
        self,
        *,
        first_name: str,
        last_name: str,
        date_of_birth: date,
        guardian_id: UUID,
    ) -> StudentRecord | None: ...


@runtime_checkable
class ClassRepository(Repository["ClassRoom"], Protocol):
    def first_for_organization(self, organization_id: UUID) -> ClassRoom | None: ...


@runtime_checkable
class ClassAssignmentRepository(Repository["ClassAssignment"], Protocol):
    def find(self, *, class_id: UUID, student_id: UUID) -> ClassAssignment | None: ...


@runtime_checkable
class OrganizationRepository(Repository["Organization"], Protocol):
    def get(self, organization_id: UUID) -> Organization | None: ...


@runtime_checkable
class AiTierRepository(Repository["AiTierGrant"], Protocol):
    def find_for_user(self, user_id: UUID) -> AiTierGrant | None: ...


@runtime_checkable
class AiUsageRepository(Repository["AiUsageTracker"], Protocol):
    def get(self, user_id: UUID) -> AiUsageTracker | None: ...


@runtime_checkable
class LeaseRepository(Protocol):
    def try_acquire(self, key: str, *, holder: str, now: datetime, expires_at: datetime) -> bool:
        """Take the lease when free or expired; return False when someone else holds it."""
        ...

    def release(self, key: str, *, holder: str) -> None: ...
