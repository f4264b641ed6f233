"""Translate trigger payloads into domain objects."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from enrolsync.domain.model import RegistrationRecord
from enrolsync.domain.reconciliation import StatusChange

from .schema import RegistrationPayload, StatusChangePayload, SyncRequestPayload

if TYPE_CHECKING:
    from collections.abc import Mapping
    from uuid import UUID

log = getLogger(__name__)

type PayloadInput = Mapping[str, object] | str | bytes


def to_registration(payload: RegistrationPayload) -> RegistrationRecord:
    return RegistrationRecord(**payload.model_dump())


def parse_status_change(raw: PayloadInput) -> StatusChangePayload:
    if isinstance(raw, (str, bytes)):
        return StatusChangePayload.model_validate_json(raw)
    return StatusChangePayload.model_validate(raw)


def parse_sync_request(raw: PayloadInput) -> UUID:
    if isinstance(raw, (str, bytes)):
        return SyncRequestPayload.model_validate_json(raw).registration_id
    return SyncRequestPayload.model_validate(raw).registration_id


def to_status_change(payload: StatusChangePayload) -> StatusChange | None:
    """Return the change carried by the payload, or None when it has no new row."""

    if payload.record is None:
        log.info("Ignoring %s trigger without a record", payload.type)
        return None
    previous = payload.old_record.status if payload.old_record is not None else None
    return StatusChange(
        record=to_registration(payload.record),
        previous_status=previous,
        operation=payload.type,
    )
