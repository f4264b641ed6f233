"""SQLAlchemy adapter package for enrolsync."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyAiTierRepository,
    SqlAlchemyAiUsageRepository,
    SqlAlchemyClassAssignmentRepository,
    SqlAlchemyClassRepository,
    SqlAlchemyGuardianProfileRepository,
    SqlAlchemyLeaseRepository,
    SqlAlchemyOrganizationRepository,
    SqlAlchemyRegistrationRepository,
    SqlAlchemyStudentRepository,
)
from .store import SqlAlchemyRegistrationStore
from .unit_of_work import (
    SqlAlchemyProvisioningUnitOfWork,
    SqlAlchemyRegistrationUnitOfWork,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyAiTierRepository",
    "SqlAlchemyAiUsageRepository",
    "SqlAlchemyClassAssignmentRepository",
    "SqlAlchemyClassRepository",
    "SqlAlchemyGuardianProfileRepository",
    "SqlAlchemyLeaseRepository",
    "SqlAlchemyOrganizationRepository",
    "SqlAlchemyProvisioningUnitOfWork",
    "SqlAlchemyRegistrationRepository",
    "SqlAlchemyRegistrationStore",
    "SqlAlchemyRegistrationUnitOfWork",
    "SqlAlchemyStudentRepository",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
