"""Best-effort welcome message for newly created guardian accounts."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from enrolsync.domain.errors import (
    DownstreamUnavailableError,
    MessageDeliveryError,
    StoreError,
)

from .templates import FALLBACK_SCHOOL_NAME, WELCOME_SUBJECT, WelcomeMessage, render_welcome_html

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from enrolsync.domain.model import RegistrationRecord
    from enrolsync.domain.ports import IdentityProvider, MessageSender, ProvisioningUnitOfWork

    from .accounts import AccountOutcome

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NotificationOutcome:
    sent: bool
    recipient: str
    reset_link: str | None = None
    error: str | None = None


class WelcomeNotifier:
    """Render and send the welcome message.

    The reset link is generated at send time. If that fails the message still
    goes out pointing at the plain redirect URL, since the one-time password in
    the body is enough to log in.
    """

    def __init__(
        self,
        *,
        sender: MessageSender,
        identity: IdentityProvider,
        unit_of_work_factory: Callable[[], ProvisioningUnitOfWork],
        reset_redirect_url: str,
        login_url: str,
        trial_days: int,
    ) -> None:
        self._sender = sender
        self._identity = identity
        self._uow_factory = unit_of_work_factory
        self._reset_redirect_url = reset_redirect_url
        self._login_url = login_url
        self._trial_days = trial_days

    def notify(
        self,
        registration: RegistrationRecord,
        account: AccountOutcome,
        *,
        timeout: float | None = None,
    ) -> NotificationOutcome:
        if account.one_time_password is None:
            log.info("No one-time password for %s; welcome message not sent", account.email)
            return NotificationOutcome(sent=False, recipient=account.email, error="no password")

        reset_link = self._reset_link(account.email)
        message = WelcomeMessage(
            guardian_name=registration.guardian_name,
            student_name=registration.student_full_name,
            school_name=self._school_name(registration.organization_id),
            email=account.email,
            one_time_password=account.one_time_password,
            reset_link=reset_link,
            login_url=self._login_url,
            trial_days=self._trial_days,
        )
        try:
            self._sender.send(
                to=account.email,
                subject=WELCOME_SUBJECT,
                html_body=render_welcome_html(message),
                timeout=timeout,
            )
        except MessageDeliveryError as exc:
            log.error("Welcome message to %s failed: %s", account.email, exc)
            return NotificationOutcome(
                sent=False, recipient=account.email, reset_link=reset_link, error=str(exc)
            )
        log.info("Welcome message sent to %s", account.email)
        return NotificationOutcome(sent=True, recipient=account.email, reset_link=reset_link)

    def _reset_link(self, email: str) -> str:
        try:
            return self._identity.generate_reset_link(email, redirect_to=self._reset_redirect_url)
        except DownstreamUnavailableError as exc:
            log.warning("Could not generate reset link for %s: %s", email, exc)
            return self._reset_redirect_url

    def _school_name(self, organization_id: UUID) -> str:
        try:
            with self._uow_factory() as uow:
                organization = uow.repositories.organizations.get(organization_id)
        except (StoreError, DownstreamUnavailableError) as exc:
            log.warning("Could not load organization %s: %s", organization_id, exc)
            return FALLBACK_SCHOOL_NAME
        if organization is None or not organization.name:
            return FALLBACK_SCHOOL_NAME
        return organization.name
