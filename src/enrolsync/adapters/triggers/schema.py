"""Pydantic models for trigger payloads (database webhooks and sync requests)."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from enrolsync.domain.model import RegistrationStatus, TriggerOperation


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class TriggerBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RegistrationPayload(TriggerBaseModel):
    """A ``registration_requests`` row as serialized by the database webhook."""

    id: UUID
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
    foreign_id: UUID | None = Field(
        default=None,
        validation_alias=AliasChoices("foreign_id", "edusite_id", "edudash_id"),
    )
    mirrored: bool = Field(
        default=False,
        validation_alias=AliasChoices("mirrored", "synced_from_edusite"),
    )
    synced_to_target: bool = Field(
        default=False,
        validation_alias=AliasChoices("synced_to_target", "synced_to_edudash"),
    )
    synced_at: datetime | None = None
    target_student_id: UUID | None = Field(
        default=None,
        validation_alias=AliasChoices("target_student_id", "edudash_student_id"),
    )
    target_guardian_id: UUID | None = Field(
        default=None,
        validation_alias=AliasChoices("target_guardian_id", "edudash_parent_id"),
    )

    _normalize_optional_text = field_validator(
        "guardian_phone",
        "guardian_address",
        "guardian_id_document_url",
        "student_gender",
        "student_birth_certificate_url",
        "student_clinic_card_url",
        "payment_method",
        "proof_of_payment_url",
        "campaign_applied",
        "reviewed_by",
        "rejection_reason",
        mode="before",
    )(_blank_to_none)

    @field_validator(
        "registration_fee_paid",
        "payment_verified",
        "documents_uploaded",
        "mirrored",
        "synced_to_target",
        mode="before",
    )
    @classmethod
    def _null_to_false(cls, value: object) -> object:
        return False if value is None else value

    @field_validator("discount_amount", mode="before")
    @classmethod
    def _null_to_zero(cls, value: object) -> object:
        return Decimal(0) if value is None else value


class OldRecordPayload(TriggerBaseModel):
    status: RegistrationStatus | None = None


class StatusChangePayload(TriggerBaseModel):
    type: TriggerOperation
    table: str | None = None
    record: RegistrationPayload | None = None
    old_record: OldRecordPayload | None = None


class SyncRequestPayload(TriggerBaseModel):
    registration_id: UUID = Field(
        validation_alias=AliasChoices("registration_id", "registrationId"),
    )
