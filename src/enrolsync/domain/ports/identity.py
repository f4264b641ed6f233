"""Port for the identity provider's admin operations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping
    from uuid import UUID

    from enrolsync.domain.model import AuthIdentity


@runtime_checkable
class IdentityProvider(Protocol):
    """Admin surface of the Target Platform's auth service.

    Everything except ``create_identity`` is safe to repeat. ``create_identity``
    raises ``IdentityConflictError`` when the email is already registered.
    """

    def find_by_email(self, email: str) -> AuthIdentity | None: ...

    def create_identity(
        self,
        *,
        email: str,
        password: str,
        metadata: Mapping[str, object] | None = None,
    ) -> AuthIdentity: ...

    def update_password(self, identity_id: UUID, password: str) -> None: ...

    def generate_reset_link(self, email: str, *, redirect_to: str) -> str: ...
