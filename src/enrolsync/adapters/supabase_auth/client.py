"""Identity provider adapter over the Supabase GoTrue admin REST API."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from enrolsync.adapters.http_resilience import ResilientClient
from enrolsync.domain.errors import IdentityConflictError, IdentityProviderError
from enrolsync.domain.model import AuthIdentity, normalize_email

from .schema import AdminUser, AdminUserList, ErrorResponse, GenerateLinkResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from uuid import UUID

    from enrolsync.config.http_resilience import ResilienceConfig
    from enrolsync.config.identity import IdentityConfig

log = getLogger(__name__)

USERS_PAGE_SIZE = 1000
_CONFLICT_STATUS_CODES = frozenset({409, 422})


class SupabaseIdentityProvider:
    """``IdentityProvider`` backed by ``/auth/v1/admin``.

    Network failures and unexpected responses raise ``IdentityProviderError``;
    a create for an already-registered email raises ``IdentityConflictError``.
    """

    def __init__(
        self,
        *,
        config: IdentityConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        page_size: int = USERS_PAGE_SIZE,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._page_size = page_size

    def find_by_email(self, email: str) -> AuthIdentity | None:
        return asyncio.run(self._find_by_email_async(normalize_email(email)))

    def create_identity(
        self,
        *,
        email: str,
        password: str,
        metadata: Mapping[str, object] | None = None,
    ) -> AuthIdentity:
        payload: dict[str, object] = {
            "email": normalize_email(email),
            "password": password,
            "email_confirm": True,
            "user_metadata": dict(metadata or {}),
        }
        user = asyncio.run(self._request_user("POST", "users", payload))
        return _to_identity(user, fallback_email=email)

    def update_password(self, identity_id: UUID, password: str) -> None:
        asyncio.run(self._request_user("PUT", f"users/{identity_id}", {"password": password}))

    def generate_reset_link(self, email: str, *, redirect_to: str) -> str:
        return asyncio.run(self._generate_reset_link_async(normalize_email(email), redirect_to))

    async def _find_by_email_async(self, email: str) -> AuthIdentity | None:
        page = 1
        async with self._client_factory(self._resilience) as client:
            while True:
                response = await self._perform(
                    client,
                    "GET",
                    "users",
                    params={"page": str(page), "per_page": str(self._page_size)},
                )
                listing = _validate(AdminUserList, response)
                for user in listing.users:
                    if user.email is not None and normalize_email(user.email) == email:
                        return _to_identity(user, fallback_email=email)
                if len(listing.users) < self._page_size:
                    return None
                page += 1

    async def _request_user(
        self,
        method: str,
        path: str,
        payload: Mapping[str, object],
    ) -> AdminUser:
        async with self._client_factory(self._resilience) as client:
            response = await self._perform(client, method, path, json=payload)
        return _validate(AdminUser, response)

    async def _generate_reset_link_async(self, email: str, redirect_to: str) -> str:
        payload = {"type": "recovery", "email": email, "redirect_to": redirect_to}
        async with self._client_factory(self._resilience) as client:
            response = await self._perform(client, "POST", "generate_link", json=payload)
        return _validate(GenerateLinkResponse, response).action_link

    async def _perform(
        self,
        client: ResilientClient,
        method: str,
        path: str,
        *,
        json: Mapping[str, object] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = await client.request(method, path, json=json, params=params)
        except httpx.HTTPError as exc:
            raise IdentityProviderError(f"Identity provider unreachable: {exc}") from exc

        if response.is_success:
            return response

        error = _parse_error(response)
        if response.status_code in _CONFLICT_STATUS_CODES and error.is_email_conflict:
            raise IdentityConflictError(error.text, status_code=response.status_code)
        log.warning(
            "Identity provider %s %s failed with %s: %s",
            method,
            path,
            response.status_code,
            error.text,
        )
        raise IdentityProviderError(
            f"Identity provider {method} {path} failed: {error.text}",
            status_code=response.status_code,
        )


def _parse_error(response: httpx.Response) -> ErrorResponse:
    try:
        return ErrorResponse.model_validate(response.json())
    except (ValueError, ValidationError):
        return ErrorResponse(msg=response.text or response.reason_phrase)


def _validate[TModel: AdminUser | AdminUserList | GenerateLinkResponse](
    model: type[TModel],
    response: httpx.Response,
) -> TModel:
    try:
        return model.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        raise IdentityProviderError(
            f"Unexpected identity provider payload: {exc}", status_code=response.status_code
        ) from exc


def _to_identity(user: AdminUser, *, fallback_email: str) -> AuthIdentity:
    return AuthIdentity(id=user.id, email=normalize_email(user.email or fallback_email))
