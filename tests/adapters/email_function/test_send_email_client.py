from __future__ import annotations

import json
from typing import TYPE_CHECKING

import httpx
import pytest

from enrolsync.adapters.email_function import SupabaseFunctionSender
from enrolsync.config import NotificationConfig
from enrolsync.domain.errors import MessageDeliveryError
from tests.helpers.http import make_client_factory

if TYPE_CHECKING:
    from collections.abc import Callable

CONFIG = NotificationConfig(project_url="https://target.example.test", service_role_key="srk")


def _send(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    timeout: float | None = None,
) -> None:
    sender = SupabaseFunctionSender(config=CONFIG, client_factory=make_client_factory(handler))
    sender.send(to="a@x.com", subject="Welcome", html_body="<p>Hi</p>", timeout=timeout)


def test_send_posts_confirmed_html_message() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "id": "msg-1"})

    _send(handler, timeout=5.0)

    [request] = seen
    assert str(request.url) == "https://target.example.test/functions/v1/send-email"
    assert request.headers["Authorization"] == "Bearer srk"
    assert json.loads(request.content) == {
        "to": "a@x.com",
        "subject": "Welcome",
        "body": "<p>Hi</p>",
        "is_html": True,
        "confirmed": True,
    }
    assert request.extensions["timeout"]["read"] == 5.0


def test_non_json_success_is_accepted() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        del request
        return httpx.Response(200, text="queued")

    _send(handler)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(200, json={"success": False, "error": "mailbox full"}),
        httpx.Response(200, json={"error": "unconfirmed"}),
    ],
)
def test_rejections_raise_delivery_error(response: httpx.Response) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        del request
        return response

    with pytest.raises(MessageDeliveryError):
        _send(handler)


def test_transport_errors_raise_delivery_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(MessageDeliveryError):
        _send(handler)
