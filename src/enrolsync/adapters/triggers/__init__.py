"""Trigger payload parsing for database webhooks and sync requests."""

from __future__ import annotations

from .schema import RegistrationPayload, StatusChangePayload, SyncRequestPayload
from .translator import (
    parse_status_change,
    parse_sync_request,
    to_registration,
    to_status_change,
)

__all__ = [
    "RegistrationPayload",
    "StatusChangePayload",
    "SyncRequestPayload",
    "parse_status_change",
    "parse_sync_request",
    "to_registration",
    "to_status_change",
]
