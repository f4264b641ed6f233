"""Registration requests mirrored between the Source Site and Target Platform."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Final
from uuid import UUID, uuid4

from enrolsync.domain.model.enums import REVIEW_OUTCOMES, RegistrationStatus

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import date, datetime

# Fields copied from the origin onto its mirror and compared during change detection.
# Anything outside this tuple is owned by whichever store holds the row.
MIRRORED_FIELDS: Final[tuple[str, ...]] = (
    "status",
    "reviewed_by",
    "reviewed_at",
    "rejection_reason",
    "proof_of_payment_url",
    "registration_fee_paid",
    "payment_verified",
    "payment_method",
    "guardian_id_document_url",
    "student_birth_certificate_url",
    "student_clinic_card_url",
)

# Bookkeeping the reconciler may write on an origin record.
SYNC_FIELDS: Final[tuple[str, ...]] = (
    "foreign_id",
    "synced_to_target",
    "synced_at",
    "target_student_id",
    "target_guardian_id",
)

# Fields copied once, when the mirror is first inserted.
_INSERT_FIELDS: Final[tuple[str, ...]] = (
    "organization_id",
    "guardian_name",
    "guardian_email",
    "guardian_phone",
    "guardian_address",
    "guardian_id_document_url",
    "student_first_name",
    "student_last_name",
    "student_dob",
    "student_gender",
    "student_birth_certificate_url",
    "student_clinic_card_url",
    "documents_uploaded",
    "documents_deadline",
    "registration_fee_amount",
    "payment_verified",
    "payment_method",
    "payment_date",
    "proof_of_payment_url",
    "campaign_applied",
    "discount_amount",
    "status",
    "reviewed_by",
    "reviewed_at",
    "rejection_reason",
    "created_at",
)


def normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


@dataclass(eq=False, kw_only=True)
class RegistrationRecord:
    """One child's enrollment application as held by a single store."""

    id: UUID = field(default_factory=uuid4)
    organization_id: UUID

    guardian_name: str
    guardian_email: str
    guardian_phone: str | None = None
    guardian_address: str | None = None
    guardian_id_document_url: str | None = None

    student_first_name: str
    student_last_name: str
    student_dob: date
    student_gender: str | None = None
    student_birth_certificate_url: str | None = None
    student_clinic_card_url: str | None = None

    documents_uploaded: bool = False
    documents_deadline: date | None = None

    registration_fee_amount: Decimal | None = None
    registration_fee_paid: bool = False
    payment_verified: bool = False
    payment_method: str | None = None
    payment_date: date | None = None
    proof_of_payment_url: str | None = None
    campaign_applied: str | None = None
    discount_amount: Decimal = Decimal(0)

    status: RegistrationStatus = RegistrationStatus.PENDING
    created_at: datetime | None = None
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    rejection_reason: str | None = None

    # Provenance: ``foreign_id`` points at the counterpart in the other store and
    # ``mirrored`` marks rows the reconciler created as copies of that counterpart.
    foreign_id: UUID | None = None
    mirrored: bool = False

    synced_to_target: bool = False
    synced_at: datetime | None = None
    target_student_id: UUID | None = None
    target_guardian_id: UUID | None = None

    @property
    def normalized_email(self) -> str:
        return normalize_email(self.guardian_email)

    @property
    def origin_id(self) -> UUID | None:
        """Id of the origin row in the other store when this row is a mirror."""
        return self.foreign_id if self.mirrored else None

    @property
    def is_mirror(self) -> bool:
        """Whether this row is a copy whose origin lives in the other store."""
        return self.origin_id is not None

    @property
    def is_approved(self) -> bool:
        return self.status == RegistrationStatus.APPROVED

    @property
    def awaits_provisioning(self) -> bool:
        """Approved origin row with no guardian account recorded against it yet."""
        return self.is_approved and not self.is_mirror and self.target_guardian_id is None

    @property
    def student_full_name(self) -> str:
        return f"{self.student_first_name} {self.student_last_name}".strip()

    def mirrored_values(self) -> dict[str, object]:
        """Project the whitelisted fields as they should appear on a mirror."""

        values = {name: getattr(self, name) for name in MIRRORED_FIELDS}
        # A proof of payment implies the fee was paid even if the flag lags behind.
        values["registration_fee_paid"] = bool(
            self.proof_of_payment_url or self.registration_fee_paid
        )
        return values

    def differing_fields(self, values: Mapping[str, object]) -> tuple[str, ...]:
        return tuple(name for name, value in values.items() if getattr(self, name) != value)

    def mirror_copy(self, *, synced_at: datetime) -> RegistrationRecord:
        """Build the row to insert into the other store for this origin record."""

        copied: dict[str, object] = {name: getattr(self, name) for name in _INSERT_FIELDS}
        copied.update(self.mirrored_values())
        copied["status"] = self.status or RegistrationStatus.PENDING
        return RegistrationRecord(
            **copied,  # pyright: ignore[reportArgumentType]
            foreign_id=self.id,
            mirrored=True,
            synced_at=synced_at,
        )


def is_review_transition(
    before: RegistrationStatus | None,
    after: RegistrationStatus,
) -> bool:
    return before != after and after in REVIEW_OUTCOMES


def is_approval_transition(
    before: RegistrationStatus | None,
    after: RegistrationStatus,
) -> bool:
    return before != RegistrationStatus.APPROVED and after == RegistrationStatus.APPROVED
