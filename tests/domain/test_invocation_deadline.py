from __future__ import annotations

import pytest

from enrolsync.domain.clock import Deadline
from enrolsync.domain.errors import InvocationTimeoutError


def test_unbounded_deadline_never_expires() -> None:
    deadline = Deadline.start(None, monotonic=lambda: 1_000.0)

    assert deadline.remaining() is None
    assert not deadline.expired
    deadline.check("anything")


def test_deadline_counts_down_and_expires() -> None:
    now = [100.0]
    deadline = Deadline.start(5.0, monotonic=lambda: now[0])

    now[0] = 102.0
    assert deadline.remaining() == pytest.approx(3.0)
    deadline.check("student")

    now[0] = 106.0
    assert deadline.remaining() == 0.0
    with pytest.raises(InvocationTimeoutError, match="before welcome message"):
        deadline.check("welcome message")
