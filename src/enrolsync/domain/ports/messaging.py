"""Port for the outbound notification function."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MessageSender(Protocol):
    """Send one HTML message; raise ``MessageDeliveryError`` if it was not accepted."""

    def send(
        self,
        *,
        to: str,
        subject: str,
        html_body: str,
        timeout: float | None = None,
    ) -> None: ...
