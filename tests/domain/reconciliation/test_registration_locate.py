from __future__ import annotations

from uuid import uuid4

import pytest

from enrolsync.domain.errors import RecordNotFoundError
from enrolsync.domain.model import RecordOrigin, StoreRole
from enrolsync.domain.reconciliation import locate_registration
from tests.helpers.registrations import InMemoryRegistrationStore, make_registration


def test_locate_prefers_local_store() -> None:
    record = make_registration()
    local = InMemoryRegistrationStore(StoreRole.TARGET, [record])
    remote = InMemoryRegistrationStore(StoreRole.SOURCE, [record])

    located = locate_registration(record.id, local=local, remote=remote)

    assert located.found
    assert located.origin is RecordOrigin.LOCAL
    assert located.store is local


def test_locate_falls_back_to_remote_store() -> None:
    record = make_registration()
    local = InMemoryRegistrationStore(StoreRole.TARGET)
    remote = InMemoryRegistrationStore(StoreRole.SOURCE, [record])

    located = locate_registration(record.id, local=local, remote=remote)

    assert located.origin is RecordOrigin.REMOTE
    assert located.store is remote
    found, store = located.require()
    assert found.guardian_email == record.guardian_email
    assert store is remote


def test_locate_reports_miss_without_raising() -> None:
    missing_id = uuid4()
    located = locate_registration(
        missing_id,
        local=InMemoryRegistrationStore(StoreRole.TARGET),
        remote=InMemoryRegistrationStore(StoreRole.SOURCE),
    )

    assert not located.found
    assert located.origin is None
    with pytest.raises(RecordNotFoundError) as exc:
        located.require()
    assert exc.value.registration_id == missing_id
