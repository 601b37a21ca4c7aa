"""Suppress-outbound guard.

While a polled snapshot is being written into the widgets, any change event
those writes trigger must not be mistaken for a user gesture and echoed back
as a command (that would oscillate forever between command and poll).
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator

from pyhapanel.exceptions import PanelError


class SyncGuard:
    """Re-entrancy guard owned by the reconciler.

    Read by UI event handlers; only ever set through
    :meth:`suppress_outbound`, and only while the UI lock is held.
    """

    __slots__ = ("_active",)

    def __init__(self) -> None:
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    @contextlib.contextmanager
    def suppress_outbound(self) -> Iterator[None]:
        """Set the guard for the duration of the block, clearing it on every exit path."""
        if self._active:
            raise PanelError("Snapshot application is already in progress")
        self._active = True
        try:
            yield
        finally:
            self._active = False

    def __bool__(self) -> bool:
        return self._active
