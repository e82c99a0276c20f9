"""
Operation time budget.
"""
from __future__ import annotations

import pytest

from console.deadline import Deadline
from console.errors import OperationTimeout


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_unbounded_deadline():
    deadline = Deadline(None)
    assert deadline.remaining() is None
    assert deadline.timeout() is None
    assert deadline.timeout(cap=5) == 5


def test_timeout_shrinks_and_caps():
    clock = FakeClock()
    deadline = Deadline(10, clock=clock)
    clock.now += 4
    assert deadline.timeout() == pytest.approx(6)
    assert deadline.timeout(cap=2) == 2


def test_expired_deadline_raises():
    clock = FakeClock()
    deadline = Deadline(1, clock=clock)
    clock.now += 2
    with pytest.raises(OperationTimeout) as exc:
        deadline.timeout()
    assert exc.value.status_code == 504
