"""Domain port definitions for adapters."""

from __future__ import annotations

from .identity import IdentityProvider
from .messaging import MessageSender
from .persistence import (
    AiTierRepository,
    AiUsageRepository,
    ClassAssignmentRepository,
    ClassRepository,
    GuardianProfileRepository,
    LeaseRepository,
    OrganizationRepository,
    RegistrationRepository,
    Repository,
    StudentRepository,
)
from .stores import RegistrationStore
from .unit_of_work import (
    ProvisioningRepositories,
    ProvisioningUnitOfWork,
    RegistrationRepositories,
    RegistrationUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AiTierRepository",
    "AiUsageRepository",
    "ClassAssignmentRepository",
    "ClassRepository",
    "GuardianProfileRepository",
    "IdentityProvider",
    "LeaseRepository",
    "MessageSender",
    "OrganizationRepository",
    "ProvisioningRepositories",
    "ProvisioningUnitOfWork",
    "RegistrationRepositories",
    "RegistrationRepository",
    "RegistrationStore",
    "RegistrationUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "StudentRepository",
    "UnitOfWork",
]
