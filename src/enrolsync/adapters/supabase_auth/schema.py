"""Pydantic models describing the GoTrue admin API payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GoTrueBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AdminUser(GoTrueBaseModel):
    id: UUID
    email: str | None = None
    user_metadata: dict[str, object] = Field(default_factory=dict)


class AdminUserList(GoTrueBaseModel):
    users: list[AdminUser] = Field(default_factory=list[AdminUser])


class GenerateLinkResponse(GoTrueBaseModel):
    action_link: str

    @model_validator(mode="before")
    @classmethod
    def _flatten_properties(cls, value: object) -> object:
        # Some deployments nest link fields under "properties".
        if isinstance(value, Mapping):
            mapping_value = cast(Mapping[str, object], value)
            properties = mapping_value.get("properties")
            if "action_link" not in mapping_value and isinstance(properties, Mapping):
                return dict(cast(Mapping[str, object], properties))
            return mapping_value
        return value


class ErrorResponse(GoTrueBaseModel):
    code: int | str | None = None
    error_code: str | None = None
    msg: str | None = None
    message: str | None = None
    error: str | None = None
    error_description: str | None = None

    @property
    def text(self) -> str:
        for candidate in (self.msg, self.message, self.error_description, self.error):
            if candidate:
                return candidate
        return "unknown error"

    @property
    def is_email_conflict(self) -> bool:
        if self.error_code in {"email_exists", "user_already_exists"}:
            return True
        return "already been registered" in self.text.lower()
