"""Account provisioning for approved registrations."""

from __future__ import annotations

from .accounts import AccountOutcome, AccountProvisioner, generate_one_time_password
from .entitlements import EntitlementGrantor, EntitlementResult
from .leases import ProvisioningLeases
from .names import split_guardian_name
from .notify import NotificationOutcome, WelcomeNotifier
from .pipeline import ProvisioningChain, ProvisioningResult
from .students import ClassPlacement, StudentEnroller, StudentOutcome
from .templates import WELCOME_SUBJECT, WelcomeMessage, render_welcome_html

__all__ = [
    "WELCOME_SUBJECT",
    "AccountOutcome",
    "AccountProvisioner",
    "ClassPlacement",
    "EntitlementGrantor",
    "EntitlementResult",
    "NotificationOutcome",
    "ProvisioningChain",
    "ProvisioningLeases",
    "ProvisioningResult",
    "StudentEnroller",
    "StudentOutcome",
    "WelcomeMessage",
    "WelcomeNotifier",
    "generate_one_time_password",
    "render_welcome_html",
    "split_guardian_name",
]
