"""Initial schema: registrations plus the Target Platform provisioning tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from enrolsync.adapters.sqlalchemy.mappings import UTCDateTime

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

REGISTRATION_STATUSES = ("pending", "under_review", "approved", "rejected", "waitlisted")
STUDENT_STATUSES = ("active", "inactive")


def _enum(name: str, values: tuple[str, ...]) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False)


def upgrade() -> None:
    op.create_table(
        "registration_requests",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("guardian_name", sa.String(255), nullable=False),
        sa.Column("guardian_email", sa.String(320), nullable=False),
        sa.Column("guardian_phone", sa.String(64)),
        sa.Column("guardian_address", sa.Text()),
        sa.Column("guardian_id_document_url", sa.Text()),
        sa.Column("student_first_name", sa.String(255), nullable=False),
        sa.Column("student_last_name", sa.String(255), nullable=False),
        sa.Column("student_dob", sa.Date(), nullable=False),
        sa.Column("student_gender", sa.String(32)),
        sa.Column("student_birth_certificate_url", sa.Text()),
        sa.Column("student_clinic_card_url", sa.Text()),
        sa.Column("documents_uploaded", sa.Boolean(), nullable=False),
        sa.Column("documents_deadline", sa.Date()),
        sa.Column("registration_fee_amount", sa.Numeric(10, 2)),
        sa.Column("registration_fee_paid", sa.Boolean(), nullable=False),
        sa.Column("payment_verified", sa.Boolean(), nullable=False),
        sa.Column("payment_method", sa.String(64)),
        sa.Column("payment_date", sa.Date()),
        sa.Column("proof_of_payment_url", sa.Text()),
        sa.Column("campaign_applied", sa.String(255)),
        sa.Column("discount_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "status",
            _enum("registration_status", REGISTRATION_STATUSES),
            nullable=False,
        ),
        sa.Column("created_at", UTCDateTime()),
        sa.Column("reviewed_at", UTCDateTime()),
        sa.Column("reviewed_by", sa.String(255)),
        sa.Column("rejection_reason", sa.Text()),
        sa.Column("foreign_id", sa.Uuid()),
        sa.Column("mirrored", sa.Boolean(), nullable=False),
        sa.Column("synced_to_target", sa.Boolean(), nullable=False),
        sa.Column("synced_at", UTCDateTime()),
        sa.Column("target_student_id", sa.Uuid()),
        sa.Column("target_guardian_id", sa.Uuid()),
        sa.PrimaryKeyConstraint("id", name="pk_registration_requests"),
        sa.UniqueConstraint("foreign_id", name="uq_registration_requests_foreign_id"),
    )
    op.create_index(
        "ix_registration_requests_guardian_email",
        "registration_requests",
        ["guardian_email"],
    )

    op.create_table(
        "organizations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_organizations"),
    )

    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("role", _enum("account_role", ("parent",)), nullable=False),
        sa.Column("auth_user_id", sa.Uuid()),
        sa.Column("organization_id", sa.Uuid()),
        sa.Column("first_name", sa.String(255)),
        sa.Column("last_name", sa.String(255)),
        sa.Column("phone", sa.String(64)),
        sa.Column("address", sa.Text()),
        sa.Column("is_trial", sa.Boolean(), nullable=False),
        sa.Column("trial_plan_tier", sa.String(64)),
        sa.Column("trial_started_at", UTCDateTime()),
        sa.Column("trial_ends_at", UTCDateTime()),
        sa.Column("trial_granted_at", UTCDateTime()),
        sa.Column("seat_status", sa.String(32)),
        sa.Column("subscription_tier", sa.String(64)),
        sa.Column("created_at", UTCDateTime()),
        sa.PrimaryKeyConstraint("id", name="pk_profiles"),
        sa.UniqueConstraint("email", "role", name="uq_profiles_email_role"),
    )

    op.create_table(
        "students",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("first_name", sa.String(255), nullable=False),
        sa.Column("last_name", sa.String(255), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("gender", sa.String(32)),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("guardian_id", sa.Uuid(), nullable=False),
        sa.Column("status", _enum("student_status", STUDENT_STATUSES), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("enrollment_date", sa.Date(), nullable=False),
        sa.Column("registration_fee_amount", sa.Numeric(10, 2)),
        sa.Column("registration_fee_paid", sa.Boolean(), nullable=False),
        sa.Column("payment_verified", sa.Boolean(), nullable=False),
        sa.Column("payment_date", sa.Date()),
        sa.ForeignKeyConstraint(
            ["guardian_id"], ["profiles.id"], name="fk_students_guardian_id_profiles"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_students"),
        sa.UniqueConstraint(
            "first_name",
            "last_name",
            "date_of_birth",
            "guardian_id",
            name="uq_students_natural_key",
        ),
    )

    op.create_table(
        "classes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_classes"),
    )
    op.create_index("ix_classes_organization_id", "classes", ["organization_id"])

    op.create_table(
        "class_assignments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("class_id", sa.Uuid(), nullable=False),
        sa.Column("student_id", sa.Uuid(), nullable=False),
        sa.Column("assigned_date", sa.Date(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("status", _enum("assignment_status", STUDENT_STATUSES), nullable=False),
        sa.ForeignKeyConstraint(
            ["class_id"], ["classes.id"], name="fk_class_assignments_class_id_classes"
        ),
        sa.ForeignKeyConstraint(
            ["student_id"], ["students.id"], name="fk_class_assignments_student_id_students"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_class_assignments"),
        sa.UniqueConstraint(
            "class_id", "student_id", name="uq_class_assignments_class_student"
        ),
    )

    op.create_table(
        "user_ai_tiers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("tier", sa.String(64), nullable=False),
        sa.Column("assigned_reason", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("expires_at", UTCDateTime()),
        sa.PrimaryKeyConstraint("id", name="pk_user_ai_tiers"),
        sa.UniqueConstraint("user_id", name="uq_user_ai_tiers_user_id"),
    )

    op.create_table(
        "user_ai_usage",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("current_tier", sa.String(64), nullable=False),
        sa.PrimaryKeyConstraint("user_id", name="pk_user_ai_usage"),
    )

    op.create_table(
        "provisioning_leases",
        sa.Column("key", sa.String(320), nullable=False),
        sa.Column("holder", sa.String(64), nullable=False),
        sa.Column("acquired_at", UTCDateTime(), nullable=False),
        sa.Column("expires_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("key", name="pk_provisioning_leases"),
    )


def downgrade() -> None:
    op.drop_table("provisioning_leases")
    op.drop_table("user_ai_usage")
    op.drop_table("user_ai_tiers")
    op.drop_table("class_assignments")
    op.drop_index("ix_classes_organization_id", table_name="classes")
    op.drop_table("classes")
    op.drop_table("students")
    op.drop_table("profiles")
    op.drop_table("organizations")
    op.drop_index("ix_registration_requests_guardian_email", table_name="registration_requests")
    op.drop_table("registration_requests")
