"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class RegistrationStatus(StrEnum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    WAITLISTED = "waitlisted"


REVIEW_OUTCOMES: frozenset[RegistrationStatus] = frozenset(
    {RegistrationStatus.APPROVED, RegistrationStatus.REJECTED, RegistrationStatus.WAITLISTED}
)


class StoreRole(StrEnum):
    """Which deployment a store adapter talks to."""

    SOURCE = "source"
    TARGET = "target"

    @property
    def other(self) -> StoreRole:
        return StoreRole.TARGET if self is StoreRole.SOURCE else StoreRole.SOURCE


class RecordOrigin(StrEnum):
    LOCAL = "local"
    REMOTE = "remote"


class ChangeKind(StrEnum):
    NEW = "new"
    CHANGED = "changed"
    UNCHANGED = "unchanged"
    ORPHANED = "orphaned"


class AccountRole(StrEnum):
    PARENT = "parent"


class StudentStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class ProvisioningPath(StrEnum):
    """Which branch of the account state machine an invocation took."""

    EXISTING_PROFILE = "existing_profile"
    REPAIRED_IDENTITY = "repaired_identity"
    CREATED = "created"


class TriggerOperation(StrEnum):
    """Row operation reported by a database change trigger."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
