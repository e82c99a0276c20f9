import time
from typing import Optional

from console.errors import OperationTimeout


class Deadline:
    """Time budget for one console operation.

    Every outbound call made while serving an operation asks the deadline
    for its timeout, so the whole operation is bounded by the caller's value.
    """

    def __init__(self, seconds: Optional[float] = None, clock=time.monotonic):
        self._clock = clock
        self.seconds = seconds
        self._expires_at = clock() + seconds if seconds is not None else None

    def remaining(self) -> Optional[float]:
        """Seconds left, or None when unbounded. Raises once the budget is spent."""
        if self._expires_at is None:
            return None
        left = self._expires_at - self._clock()
        if left <= 0:
            raise OperationTimeout(f"Operation exceeded its {self.seconds}s budget")
        return left

    def timeout(self, cap: Optional[float] = None) -> Optional[float]:
        left = self.remaining()
        if left is None:
            return cap
        if cap is None:
            return left
        return min(left, cap)
