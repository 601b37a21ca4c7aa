"""Recurring, ordered state polling.

After a startup delay, every device is polled in table order with a short
gap between devices, followed by a longer pause before the next cycle.  At
most one poll is in flight at a time and all polls share one response
buffer.  A failed poll changes nothing; the next cycle simply tries again.
Snapshots are applied in a worker thread, so waiting for the UI lock never
blocks the event loop.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from pyhapanel._api.states import fetch_state, state_path
from pyhapanel._transport import Transport
from pyhapanel.config import PanelConfig
from pyhapanel.exceptions import (
    PanelLockTimeoutError,
    PanelMalformedResponseError,
    PanelRemoteRejectedError,
    PanelTransportError,
    PanelUnknownDeviceError,
)
from pyhapanel.ingestion.buffer import ResponseBuffer
from pyhapanel.ingestion.snapshot import build_snapshot
from pyhapanel.models.snapshot import PolledSnapshot
from pyhapanel.state.reconciler import Reconciler
from pyhapanel.state.store import SyncState

_logger = logging.getLogger(__name__)


class PollScheduler:
    """Drives the poll loop and feeds snapshots to the reconciler."""

    def __init__(
        self,
        config: PanelConfig,
        transport: Transport,
        state: SyncState,
        reconciler: Reconciler,
    ) -> None:
        self._config = config
        self._transport = transport
        self._state = state
        self._reconciler = reconciler
        self._buffer = ResponseBuffer(config.response_buffer_size)
        self._poll_lock = asyncio.Lock()
        self._stopping = asyncio.Event()

    @property
    def buffer(self) -> ResponseBuffer:
        return self._buffer

    @property
    def stopping(self) -> bool:
        return self._stopping.is_set()

    def stop(self) -> None:
        """Ask :meth:`run` to return at its next pause.

        A poll already in flight runs to completion or to its timeout.
        """
        self._stopping.set()

    async def _pause(self, delay: float) -> bool:
        """Sleep for *delay* seconds; return ``True`` if a stop was requested."""
        if self._stopping.is_set():
            return True
        if delay > 0:
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._stopping.wait(), delay)
        else:
            # Yield even without a delay.
            await asyncio.sleep(0)
        return self._stopping.is_set()

    async def poll_once(self, entity_id: str) -> PolledSnapshot | None:
        """Poll one device and apply the result.

        Returns the applied snapshot, or ``None`` when the attempt was
        discarded (transport failure, non-200, nothing usable, UI lock busy).
        """
        async with self._poll_lock:
            path = state_path(entity_id)
            try:
                device = self._state.get(entity_id)
                await fetch_state(self._config, self._transport, entity_id, self._buffer)
                snapshot = build_snapshot(device, self._buffer, endpoint=path)
                await asyncio.to_thread(self._reconciler.apply_snapshot, snapshot)
            except PanelRemoteRejectedError as exc:
                _logger.debug("Poll %s rejected: HTTP %s", entity_id, exc.status_code)
                return None
            except PanelTransportError as exc:
                _logger.debug("Poll %s failed: %s", entity_id, exc)
                return None
            except PanelMalformedResponseError as exc:
                _logger.debug(
                    "Poll %s unusable (%d bytes, truncated=%s): %s",
                    entity_id,
                    self._buffer.length,
                    self._buffer.truncated,
                    exc,
                )
                return None
            except PanelLockTimeoutError:
                _logger.debug("Poll %s dropped: UI lock busy", entity_id)
                return None
            except PanelUnknownDeviceError:
                _logger.warning("Poll requested for unknown device %s", entity_id)
                return None
            return snapshot

    async def run_cycle(self) -> int:
        """Poll every device once, in order.  Returns the number of snapshots applied."""
        applied = 0
        entity_ids = self._state.entity_ids
        for index, entity_id in enumerate(entity_ids):
            if await self.poll_once(entity_id) is not None:
                applied += 1
            if index < len(entity_ids) - 1 and await self._pause(self._config.poll_gap):
                break
        return applied

    async def run(self) -> None:
        """Poll forever (until :meth:`stop`)."""
        _logger.info("Polling %d devices at %s", len(self._state), self._config.base_url)
        if await self._pause(self._config.startup_delay):
            return
        while True:
            applied = await self.run_cycle()
            _logger.debug("Poll cycle done: %d/%d applied", applied, len(self._state))
            if await self._pause(self._config.poll_interval):
                return
