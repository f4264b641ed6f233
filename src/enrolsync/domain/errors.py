"""Error taxonomy shared by reconciliation and provisioning."""

from __future__ import annotations


class SyncError(RuntimeError):
    """Base class for failures raised by the registration pipeline."""


class RecordNotFoundError(SyncError):
    """The registration vanished between trigger emission and processing."""

    def __init__(self, registration_id: object) -> None:
        super().__init__(f"Registration {registration_id} not found in any store")
        self.registration_id = registration_id


class StoreError(SyncError):
    """A single read or write against a store failed."""


class DuplicateRecordError(StoreError):
    """A write collided with a uniqueness constraint (natural or foreign key)."""


class DownstreamUnavailableError(SyncError):
    """A database or the identity provider could not be reached.

    The whole invocation fails; the trigger infrastructure retries it.
    """


class IdentityProviderError(DownstreamUnavailableError):
    """The identity provider rejected or failed an admin request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class IdentityConflictError(IdentityProviderError):
    """An identity with the requested email already exists."""


class MessageDeliveryError(SyncError):
    """The notification boundary did not accept a message."""


class ProvisioningError(SyncError):
    """Identity or profile creation failed; nothing downstream can proceed."""


class InvocationTimeoutError(SyncError):
    """The invocation's wall-clock budget elapsed."""


class LeaseUnavailableError(SyncError):
    """Another invocation currently holds the provisioning lease for a guardian."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Provisioning lease for {key} is held by another invocation")
        self.key = key
