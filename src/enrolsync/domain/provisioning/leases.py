"""Advisory provisioning lease keyed by normalized guardian email."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from enrolsync.domain.clock import utc_now
from enrolsync.domain.errors import (
    DownstreamUnavailableError,
    DuplicateRecordError,
    LeaseUnavailableError,
    StoreError,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from enrolsync.domain.clock import Clock
    from enrolsync.domain.ports import ProvisioningUnitOfWork

log = getLogger(__name__)


class ProvisioningLeases:
    """Hold a short lease around one guardian's provisioning chain.

    A lease that outlives ``ttl_seconds`` (crashed holder) may be taken over.
    With ``enabled=False`` ``hold`` is a no-op and the idempotent lookups are
    the only protection against concurrent invocations.
    """

    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], ProvisioningUnitOfWork],
        ttl_seconds: float,
        enabled: bool = True,
        clock: Clock = utc_now,
        holder: str | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._ttl = timedelta(seconds=ttl_seconds)
        self._enabled = enabled
        self._clock = clock
        self.holder = holder or uuid.uuid4().hex

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        if not self._enabled:
            yield
            return

        now = self._clock()
        try:
            with self._uow_factory() as uow:
                acquired = uow.repositories.leases.try_acquire(
                    key, holder=self.holder, now=now, expires_at=now + self._ttl
                )
                uow.commit()
        except DuplicateRecordError:
            acquired = False
        if not acquired:
            raise LeaseUnavailableError(key)
        log.debug("Acquired provisioning lease for %s", key)
        try:
            yield
        finally:
            self._release(key)

    def _release(self, key: str) -> None:
        try:
            with self._uow_factory() as uow:
                uow.repositories.leases.release(key, holder=self.holder)
                uow.commit()
        except (StoreError, DownstreamUnavailableError) as exc:
            # The lease expires on its own after the TTL.
            log.warning("Failed to release provisioning lease for %s: %s", key, exc)
        else:
            log.debug("Released provisioning lease for %s", key)
