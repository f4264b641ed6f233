"""The provisioning chain run when a registration becomes approved.

Order: lease, account, student, class placement, then (new accounts only)
trial entitlement and welcome message. The account step is the only fatal
one; everything after it is step-scoped and reported in the result.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from enrolsync.domain.clock import Deadline, utc_now
from enrolsync.domain.errors import StoreError

from .notify import NotificationOutcome

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from enrolsync.domain.clock import Clock
    from enrolsync.domain.model import RegistrationRecord

    from .accounts import AccountOutcome, AccountProvisioner
    from .entitlements import EntitlementGrantor, EntitlementResult
    from .leases import ProvisioningLeases
    from .notify import WelcomeNotifier
    from .students import StudentEnroller

log = getLogger(__name__)


@dataclass(slots=True)
class ProvisioningResult:
    registration_id: UUID
    account: AccountOutcome
    student_id: UUID | None = None
    class_id: UUID | None = None
    entitlement: EntitlementResult | None = None
    notification: NotificationOutcome | None = None
    errors: list[str] = field(default_factory=list[str])

    @property
    def guardian_id(self) -> UUID:
        return self.account.profile_id


class ProvisioningChain:
    def __init__(
        self,
        *,
        accounts: AccountProvisioner,
        students: StudentEnroller,
        entitlements: EntitlementGrantor,
        notifier: WelcomeNotifier,
        leases: ProvisioningLeases,
        budget_seconds: float | None = None,
        clock: Clock = utc_now,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._accounts = accounts
        self._students = students
        self._entitlements = entitlements
        self._notifier = notifier
        self._leases = leases
        self._budget_seconds = budget_seconds
        self._clock = clock
        self._monotonic = monotonic

    def start_deadline(self) -> Deadline:
        """Start a budget that callers can share across several runs."""
        return Deadline.start(self._budget_seconds, monotonic=self._monotonic)

    def run(
        self,
        registration: RegistrationRecord,
        *,
        deadline: Deadline | None = None,
    ) -> ProvisioningResult:
        deadline = deadline or self.start_deadline()
        with self._leases.hold(registration.normalized_email):
            deadline.check("account provisioning")
            account = self._accounts.provision(registration)
            result = ProvisioningResult(registration_id=registration.id, account=account)

            self._enroll(registration, result)
            if account.is_new:
                result.entitlement = self._entitlements.grant(
                    account.profile_id, now=self._clock()
                )
                result.errors.extend(result.entitlement.errors)
                result.notification = self._notify(registration, account, deadline)
                if not result.notification.sent:
                    result.errors.append(f"welcome message: {result.notification.error}")
            else:
                log.info(
                    "Guardian account already exists, "
                    "skipped trial grant and welcome message for %s",
                    account.email,
                )
        return result

    def _notify(
        self,
        registration: RegistrationRecord,
        account: AccountOutcome,
        deadline: Deadline,
    ) -> NotificationOutcome:
        remaining = deadline.remaining()
        if remaining is not None and remaining <= 0.0:
            log.error(
                "Invocation budget exhausted; welcome message to %s not sent", account.email
            )
            return NotificationOutcome(
                sent=False, recipient=account.email, error="invocation budget exhausted"
            )
        return self._notifier.notify(registration, account, timeout=remaining)

    def _enroll(self, registration: RegistrationRecord, result: ProvisioningResult) -> None:
        try:
            student = self._students.enroll(registration, result.guardian_id)
        except StoreError as exc:
            log.error("Failed to create student for registration %s: %s", registration.id, exc)
            result.errors.append(f"student: {exc}")
            return
        result.student_id = student.student_id

        try:
            placement = self._students.assign_class(
                student.student_id, registration.organization_id
            )
        except StoreError as exc:
            log.error("Failed to assign student %s to a class: %s", student.student_id, exc)
            result.errors.append(f"class assignment: {exc}")
            return
        if placement is not None:
            result.class_id = placement.class_id
