"""A counting barrier that releases once N signals have arrived."""

from __future__ import annotations

import threading
from typing import Optional


class CountdownLatch:
    """Blocks :meth:`wait` callers until :meth:`count_down` ran *count* times.

    Build a fresh latch for every batch; a latch cannot be reset.
    """

    def __init__(self, count: int) -> None:
        if count < 0:
            raise ValueError("count must be >= 0")
        self._count = count
        self._cond = threading.Condition()

    @property
    def count(self) -> int:
        """Signals still outstanding."""
        with self._cond:
            return self._count

    def count_down(self) -> None:
        """Record one signal.

        Raises:
            ValueError: If the latch has already reached zero.
        """
        with self._cond:
            if self._count == 0:
                raise ValueError("count_down() called more times than the latch count")
            self._count -= 1
            if self._count == 0:
                self._cond.notify_all()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the count reaches zero.

        Returns:
            ``True`` once released, ``False`` if *timeout* elapsed first.
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._count == 0, timeout=timeout)
