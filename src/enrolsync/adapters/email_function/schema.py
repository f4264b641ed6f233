"""Payloads exchanged with the hosted send-email function."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SendEmailRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    to: str
    subject: str
    body: str
    is_html: bool = True
    # The function refuses to send unless the caller confirms the message.
    confirmed: bool = True


class SendEmailResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    success: bool | None = None
    id: str | None = None
    message_id: str | None = None
    error: str | None = None
