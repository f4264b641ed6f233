"""SQLAlchemy mapping metadata for the enrolsync domain model.

Both deployments share one schema. The Source Site only ever touches
``registration_requests``; the remaining tables belong to the Target Platform.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from enum import StrEnum
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from enrolsync.domain.model import (
    AccountRole,
    AiTierGrant,
    AiUsageTracker,
    ClassAssignment,
    ClassRoom,
    GuardianProfile,
    Organization,
    ProvisioningLease,
    RegistrationRecord,
    RegistrationStatus,
    StudentRecord,
    StudentStatus,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _str_enum(enum_cls: type[StrEnum], name: str) -> Enum:
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        validate_strings=True,
        values_callable=lambda members: [member.value for member in members],
    )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Registrations (both stores) --------------------------------------------------

registration_table = Table(
    "registration_requests",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("organization_id", UUIDColumnType, nullable=False),
    Column("guardian_name", String(255), nullable=False),
    Column("guardian_email", String(320), nullable=False),
    Column("guardian_phone", String(64)),
    Column("guardian_address", Text),
    Column("guardian_id_document_url", Text),
    Column("student_first_name", String(255), nullable=False),
    Column("student_last_name", String(255), nullable=False),
    Column("student_dob", Date, nullable=False),
    Column("student_gender", String(32)),
    Column("student_birth_certificate_url", Text),
    Column("student_clinic_card_url", Text),
    Column("documents_uploaded", Boolean, nullable=False, default=False),
    Column("documents_deadline", Date),
    Column("registration_fee_amount", Numeric(10, 2)),
    Column("registration_fee_paid", Boolean, nullable=False, default=False),
    Column("payment_verified", Boolean, nullable=False, default=False),
    Column("payment_method", String(64)),
    Column("payment_date", Date),
    Column("proof_of_payment_url", Text),
    Column("campaign_applied", String(255)),
    Column("discount_amount", Numeric(10, 2), nullable=False, default=0),
    Column(
        "status",
        _str_enum(RegistrationStatus, "registration_status"),
        nullable=False,
        default=RegistrationStatus.PENDING,
    ),
    Column("created_at", UTCDateTime()),
    Column("reviewed_at", UTCDateTime()),
    Column("reviewed_by", String(255)),
    Column("rejection_reason", Text),
    Column("foreign_id", UUIDColumnType, unique=True),
    Column("mirrored", Boolean, nullable=False, default=False),
    Column("synced_to_target", Boolean, nullable=False, default=False),
    Column("synced_at", UTCDateTime()),
    Column("target_student_id", UUIDColumnType),
    Column("target_guardian_id", UUIDColumnType),
    Index("ix_registration_requests_guardian_email", "guardian_email"),
)

# Target Platform --------------------------------------------------------------

organization_table = Table(
    "organizations",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("name", String(255), nullable=False),
)

profile_table = Table(
    "profiles",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("email", String(320), nullable=False),
    Column("role", _str_enum(AccountRole, "account_role"), nullable=False),
    Column("auth_user_id", UUIDColumnType),
    Column("organization_id", UUIDColumnType),
    Column("first_name", String(255)),
    Column("last_name", String(255)),
    Column("phone", String(64)),
    Column("address", Text),
    Column("is_trial", Boolean, nullable=False, default=False),
    Column("trial_plan_tier", String(64)),
    Column("trial_started_at", UTCDateTime()),
    Column("trial_ends_at", UTCDateTime()),
    Column("trial_granted_at", UTCDateTime()),
    Column("seat_status", String(32)),
    Column("subscription_tier", String(64)),
    Column("created_at", UTCDateTime()),
    UniqueConstraint("email", "role", name="uq_profiles_email_role"),
)

student_table = Table(
    "students",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("first_name", String(255), nullable=False),
    Column("last_name", String(255), nullable=False),
    Column("date_of_birth", Date, nullable=False),
    Column("gender", String(32)),
    Column("organization_id", UUIDColumnType, nullable=False),
    Column("guardian_id", UUIDColumnType, ForeignKey("profiles.id"), nullable=False),
    Column("status", _str_enum(StudentStatus, "student_status"), nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("enrollment_date", Date, nullable=False),
    Column("registration_fee_amount", Numeric(10, 2)),
    Column("registration_fee_paid", Boolean, nullable=False, default=False),
    Column("payment_verified", Boolean, nullable=False, default=False),
    Column("payment_date", Date),
    UniqueConstraint(
        "first_name",
        "last_name",
        "date_of_birth",
        "guardian_id",
        name="uq_students_natural_key",
    ),
)

class_table = Table(
    "classes",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("organization_id", UUIDColumnType, nullable=False, index=True),
    Column("name", String(255), nullable=False),
)

class_assignment_table = Table(
    "class_assignments",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("class_id", UUIDColumnType, ForeignKey("classes.id"), nullable=False),
    Column("student_id", UUIDColumnType, ForeignKey("students.id"), nullable=False),
    Column("assigned_date", Date, nullable=False),
    Column("start_date", Date, nullable=False),
    Column("status", _str_enum(StudentStatus, "assignment_status"), nullable=False),
    UniqueConstraint("class_id", "student_id", name="uq_class_assignments_class_student"),
)

ai_tier_table = Table(
    "user_ai_tiers",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("user_id", UUIDColumnType, nullable=False, unique=True),
    Column("tier", String(64), nullable=False),
    Column("assigned_reason", String(255), nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("expires_at", UTCDateTime()),
)

ai_usage_table = Table(
    "user_ai_usage",
    mapper_registry.metadata,
    Column("user_id", UUIDColumnType, primary_key=True),
    Column("current_tier", String(64), nullable=False),
)

provisioning_lease_table = Table(
    "provisioning_leases",
    mapper_registry.metadata,
    Column("key", String(320), primary_key=True),
    Column("holder", String(64), nullable=False),
    Column("acquired_at", UTCDateTime(), nullable=False),
    Column("expires_at", UTCDateTime(), nullable=False),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(RegistrationRecord, registration_table)
    mapper_registry.map_imperatively(Organization, organization_table)
    mapper_registry.map_imperatively(GuardianProfile, profile_table)
    mapper_registry.map_imperatively(StudentRecord, student_table)
    mapper_registry.map_imperatively(ClassRoom, class_table)
    mapper_registry.map_imperatively(ClassAssignment, class_assignment_table)
    mapper_registry.map_imperatively(AiTierGrant, ai_tier_table)
    mapper_registry.map_imperatively(AiUsageTracker, ai_usage_table)
    mapper_registry.map_imperatively(ProvisioningLease, provisioning_lease_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)

