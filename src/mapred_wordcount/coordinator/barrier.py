"""
Completion barrier: counts map tasks launched but not yet merged.
"""

import threading
from typing import Optional


class WaitGroup:
    """Counter that lets a waiter block until outstanding work reaches zero"""

    def __init__(self):
        self._count = 0
        self._cond = threading.Condition()

    @property
    def count(self) -> int:
        with self._cond:
            return self._count

    def add(self, n: int = 1):
        """Register n units of outstanding work. Call before launching the work."""
        with self._cond:
            if self._count + n < 0:
                raise ValueError(f"WaitGroup counter would go negative ({self._count} + {n})")
            self._count += n
            if self._count == 0:
                self._cond.notify_all()

    def done(self):
        """Mark one unit of work as finished."""
        self.add(-1)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the counter is zero.

        Returns:
            True once the counter is zero, False if the timeout expired first
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._count == 0, timeout=timeout)
