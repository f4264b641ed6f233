"""Public domain model surface."""

from __future__ import annotations

from enrolsync.domain.model.accounts import (
    AuthIdentity,
    GuardianProfile,
    ProfileSeed,
    ProvisioningLease,
)
from enrolsync.domain.model.entitlements import AiTierGrant, AiUsageTracker, TrialEntitlement
from enrolsync.domain.model.enums import (
    REVIEW_OUTCOMES,
    AccountRole,
    ChangeKind,
    ProvisioningPath,
    RecordOrigin,
    RegistrationStatus,
    StoreRole,
    StudentStatus,
    TriggerOperation,
)
from enrolsync.domain.model.registration import (
    MIRRORED_FIELDS,
    SYNC_FIELDS,
    RegistrationRecord,
    is_approval_transition,
    is_review_transition,
    normalize_email,
)
from enrolsync.domain.model.students import ClassAssignment, ClassRoom, Organization, StudentRecord

__all__ = [  # noqa: RUF022
    # enums
    "AccountRole",
    "ChangeKind",
    "ProvisioningPath",
    "RecordOrigin",
    "RegistrationStatus",
    "REVIEW_OUTCOMES",
    "StoreRole",
    "StudentStatus",
    "TriggerOperation",
    # registrations
    "MIRRORED_FIELDS",
    "SYNC_FIELDS",
    "RegistrationRecord",
    "is_approval_transition",
    "is_review_transition",
    "normalize_email",
    # accounts
    "AuthIdentity",
    "GuardianProfile",
    "ProfileSeed",
    "ProvisioningLease",
    # students
    "ClassAssignment",
    "ClassRoom",
    "Organization",
    "StudentRecord",
    # entitlements
    "AiTierGrant",
    "AiUsageTracker",
    "TrialEntitlement",
]
