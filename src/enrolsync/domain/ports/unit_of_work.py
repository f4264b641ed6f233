"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from enrolsync.domain.ports.persistence import (
        AiTierRepository,
        AiUsageRepository,
        ClassAssignmentRepository,
        ClassRepository,
        GuardianProfileRepository,
        LeaseRepository,
        OrganizationRepository,
        RegistrationRepository,
        StudentRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...  # the repo list itself should be immutable

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class RegistrationRepositories(RepositoryCollection):
    """Repositories required to read and write registration rows."""

    registrations: RegistrationRepository


@dataclass(slots=True)
class ProvisioningRepositories(RepositoryCollection):
    """Target Platform repositories touched by the provisioning chain."""

    profiles: GuardianProfileRepository
    students: StudentRepository
    classes: ClassRepository
    class_assignments: ClassAssignmentRepository
    organizations: OrganizationRepository
    ai_tiers: AiTierRepository
    ai_usage: AiUsageRepository
    leases: LeaseRepository


type RegistrationUnitOfWork = UnitOfWork[RegistrationRepositories]
type ProvisioningUnitOfWork = UnitOfWork[ProvisioningRepositories]
