from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from enrolsync.domain.errors import LeaseUnavailableError, StoreError
from enrolsync.domain.model import ProvisioningLease
from enrolsync.domain.provisioning import ProvisioningLeases
from tests.helpers.registrations import FIXED_NOW, fixed_clock

if TYPE_CHECKING:
    from tests.helpers.provisioning import ProvisioningState

KEY = "thandi@example.com"


def _leases(state: ProvisioningState, *, enabled: bool = True) -> ProvisioningLeases:
    return ProvisioningLeases(
        unit_of_work_factory=state.unit_of_work,
        ttl_seconds=60,
        enabled=enabled,
        clock=fixed_clock,
        holder="invocation-a",
    )


def test_hold_acquires_and_releases(provisioning_state: ProvisioningState) -> None:
    with _leases(provisioning_state).hold(KEY):
        lease = provisioning_state.leases[KEY]
        assert lease.holder == "invocation-a"
        assert lease.expires_at == FIXED_NOW + timedelta(seconds=60)

    assert provisioning_state.leases == {}


def test_hold_releases_when_the_body_fails(provisioning_state: ProvisioningState) -> None:
    with pytest.raises(RuntimeError), _leases(provisioning_state).hold(KEY):
        raise RuntimeError("boom")

    assert provisioning_state.leases == {}


def test_live_lease_held_elsewhere_is_unavailable(provisioning_state: ProvisioningState) -> None:
    provisioning_state.leases[KEY] = ProvisioningLease(
        key=KEY,
        holder="invocation-b",
        acquired_at=FIXED_NOW,
        expires_at=FIXED_NOW + timedelta(seconds=30),
    )

    with pytest.raises(LeaseUnavailableError) as exc, _leases(provisioning_state).hold(KEY):
        pass

    assert exc.value.key == KEY
    assert provisioning_state.leases[KEY].holder == "invocation-b"


def test_expired_lease_is_taken_over(provisioning_state: ProvisioningState) -> None:
    provisioning_state.leases[KEY] = ProvisioningLease(
        key=KEY,
        holder="crashed",
        acquired_at=FIXED_NOW - timedelta(minutes=5),
        expires_at=FIXED_NOW - timedelta(minutes=4),
    )
    entered = False

    with _leases(provisioning_state).hold(KEY):
        entered = True

    assert entered


def test_release_failure_is_tolerated(provisioning_state: ProvisioningState) -> None:
    provisioning_state.failures["leases.release"] = StoreError("connection reset")

    with _leases(provisioning_state).hold(KEY):
        pass

    assert provisioning_state.leases[KEY].holder == "invocation-a"


def test_disabled_leases_do_not_touch_the_store(provisioning_state: ProvisioningState) -> None:
    provisioning_state.failures["leases.try_acquire"] = StoreError("should not be called")

    with _leases(provisioning_state, enabled=False).hold(KEY):
        pass

    assert provisioning_state.commits == 0
