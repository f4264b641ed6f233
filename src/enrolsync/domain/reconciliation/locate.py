"""Find which store holds a registration and fetch that copy."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from enrolsync.domain.errors import RecordNotFoundError
from enrolsync.domain.model import RecordOrigin

if TYPE_CHECKING:
    from uuid import UUID

    from enrolsync.domain.model import RegistrationRecord
    from enrolsync.domain.ports import RegistrationStore

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LocatedRecord:
    """Result of a lookup; ``record`` is None when neither store has the id."""

    registration_id: UUID
    record: RegistrationRecord | None = None
    origin: RecordOrigin | None = None
    store: RegistrationStore | None = None

    @property
    def found(self) -> bool:
        return self.record is not None

    def require(self) -> tuple[RegistrationRecord, RegistrationStore]:
        """Return the record with the store holding it, or raise when neither has it."""
        if self.record is None or self.store is None:
            raise RecordNotFoundError(self.registration_id)
        return self.record, self.store


def locate_registration(
    registration_id: UUID,
    *,
    local: RegistrationStore,
    remote: RegistrationStore,
) -> LocatedRecord:
    """Probe ``local`` first, then ``remote``.

    A miss in both stores is a normal outcome: the record may have been deleted
    after the triggering event was emitted. Store errors propagate.
    """

    record = local.get(registration_id)
    if record is not None:
        return LocatedRecord(registration_id, record, RecordOrigin.LOCAL, local)

    log.info(
        "Registration %s not found in %s store, checking %s",
        registration_id,
        local.role,
        remote.role,
    )
    record = remote.get(registration_id)
    if record is not None:
        return LocatedRecord(registration_id, record, RecordOrigin.REMOTE, remote)

    log.info("Registration %s not found in either store", registration_id)
    return LocatedRecord(registration_id)
