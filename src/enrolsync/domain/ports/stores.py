"""Row-level port over one deployment's ``registration_requests`` table."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from uuid import UUID

    from enrolsync.domain.model import RegistrationRecord, StoreRole


@runtime_checkable
class RegistrationStore(Protocol):
    """Each call is its own short transaction, like a request to a hosted database.

    Implementations raise ``StoreError`` for row-scoped failures and
    ``DownstreamUnavailableError`` when the backend cannot be reached.
    """

    @property
    def role(self) -> StoreRole: ...

    def get(self, registration_id: UUID) -> RegistrationRecord | None: ...

    def get_by_foreign_id(self, foreign_id: UUID) -> RegistrationRecord | None: ...

    def list_all(self) -> Sequence[RegistrationRecord]: ...

    def add(self, record: RegistrationRecord) -> None: ...

    def update_fields(self, registration_id: UUID, values: Mapping[str, object]) -> bool:
        """Write ``values`` onto one row; return False when no row matched."""
        ...

    def delete_many(self, registration_ids: Iterable[UUID]) -> int:
        """Delete the given ids; ids that are already gone simply match nothing."""
        ...
