"""UI mutual-exclusion lock.

All device and widget reads/writes happen while this lock is held.  It is
reentrant so a widget toolkit that dispatches change events synchronously
from inside a snapshot application can run the event handlers on the same
thread without deadlocking.
"""

from __future__ import annotations

import contextlib
import threading
from collections.abc import Iterator

from pyhapanel.exceptions import PanelLockTimeoutError


class UiLock:
    """Scoped wrapper around a :class:`threading.RLock`."""

    def __init__(self) -> None:
        self._lock = threading.RLock()

    def acquire(self, timeout: float | None = None) -> bool:
        """Acquire the lock, waiting at most *timeout* seconds (``None`` waits forever)."""
        if timeout is None:
            return self._lock.acquire()
        return self._lock.acquire(timeout=timeout)

    def release(self) -> None:
        self._lock.release()

    @contextlib.contextmanager
    def hold(self, timeout: float | None = None) -> Iterator[None]:
        """Hold the lock for the block; always released on exit.

        Raises
        ------
        PanelLockTimeoutError
            The lock was not acquired within *timeout*.
        """
        if not self.acquire(timeout):
            raise PanelLockTimeoutError(timeout)
        try:
            yield
        finally:
            self.release()

    def __enter__(self) -> UiLock:
        self.acquire()
        return self

    def __exit__(self, *exc: object) -> None:
        self.release()
