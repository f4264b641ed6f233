"""``MessageSender`` that invokes the Target Platform's send-email function."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from enrolsync.adapters.http_resilience import ResilientClient
from enrolsync.domain.errors import MessageDeliveryError

from .schema import SendEmailRequest, SendEmailResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from enrolsync.config.http_resilience import ResilienceConfig
    from enrolsync.config.notifications import NotificationConfig

log = getLogger(__name__)


class SupabaseFunctionSender:
    def __init__(
        self,
        *,
        config: NotificationConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def send(
        self,
        *,
        to: str,
        subject: str,
        html_body: str,
        timeout: float | None = None,
    ) -> None:
        request = SendEmailRequest(to=to, subject=subject, body=html_body)
        asyncio.run(self._send_async(request, timeout=timeout))

    async def _send_async(self, request: SendEmailRequest, *, timeout: float | None) -> None:
        effective_timeout = timeout if timeout is not None else self._resilience.timeout_seconds
        async with self._client_factory(self._resilience) as client:
            try:
                response = await client.post(
                    self._config.function_url,
                    json=request.model_dump(),
                    timeout=effective_timeout,
                )
            except httpx.HTTPError as exc:
                raise MessageDeliveryError(f"send-email function unreachable: {exc}") from exc

        if not response.is_success:
            raise MessageDeliveryError(
                f"send-email function returned {response.status_code}: {response.text[:200]}"
            )

        try:
            payload = SendEmailResponse.model_validate(response.json())
        except (ValueError, ValidationError):
            log.debug("send-email returned a non-JSON body; treating as accepted")
            return
        if payload.success is False or payload.error:
            raise MessageDeliveryError(f"send-email function rejected message: {payload.error}")
        log.debug("send-email accepted message %s", payload.id or payload.message_id)
