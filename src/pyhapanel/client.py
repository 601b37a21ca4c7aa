"""High-level async client tying the synchronization engine together."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from collections.abc import Callable, Iterable
from typing import Any

import aiohttp

from pyhapanel._transport import HttpTransport, Transport
from pyhapanel.config import PanelConfig
from pyhapanel.dispatcher import CommandDispatcher
from pyhapanel.exceptions import PanelError, PanelLockTimeoutError
from pyhapanel.models.command import CommandResult, DeviceCommand
from pyhapanel.models.device import Device
from pyhapanel.scheduler import PollScheduler
from pyhapanel.state.lock import UiLock
from pyhapanel.state.reconciler import Reconciler
from pyhapanel.state.store import SyncState
from pyhapanel.surface import MemorySurface, WidgetSurface

_logger = logging.getLogger(__name__)


class PanelClient:
    """Async client owning the poll loop and the command path.

    The poll loop runs as a task on the client's event loop.  Gestures
    arrive on the UI thread; the resulting commands are scheduled onto the
    same loop, so a slow request never blocks the UI.  Commands run one at a
    time in submission order.  Work that takes the UI lock runs in a worker
    thread so a busy lock never stalls the loop.

    Usage::

        async with PanelClient(config, surface) as client:
            await client.run()
    """

    def __init__(
        self,
        config: PanelConfig,
        surface: WidgetSurface | None = None,
        *,
        devices: Iterable[Device] | None = None,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        on_command_result: Callable[[CommandResult], None] | None = None,
    ) -> None:
        self._config = config
        self._surface: WidgetSurface = surface if surface is not None else MemorySurface()
        self._external_session = session is not None
        self._http_session = session
        self._external_transport = transport is not None
        self._transport = transport
        self._on_command_result = on_command_result
        self._state = SyncState(devices)
        self._lock = UiLock()
        self._reconciler = Reconciler(
            self._state,
            self._surface,
            self._lock,
            self.submit_command,
            lock_timeout=config.lock_timeout,
        )
        self._surface.bind(self._reconciler.on_switch_toggled, self._reconciler.on_slider_released)
        self._dispatcher: CommandDispatcher | None = None
        self._scheduler: PollScheduler | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._poll_task: asyncio.Task[None] | None = None
        self._inflight: set[concurrent.futures.Future[CommandResult]] = set()
        self._command_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> PanelClient:
        self._loop = asyncio.get_running_loop()
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        self._dispatcher = CommandDispatcher(self._config, self._transport)
        self._scheduler = PollScheduler(self._config, self._transport, self._state, self._reconciler)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
        await self.drain_commands()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None
        self._dispatcher = None
        self._scheduler = None
        self._loop = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> PanelConfig:
        return self._config

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def surface(self) -> WidgetSurface:
        return self._surface

    @property
    def lock(self) -> UiLock:
        return self._lock

    @property
    def reconciler(self) -> Reconciler:
        return self._reconciler

    @property
    def dispatcher(self) -> CommandDispatcher:
        if self._dispatcher is None:
            raise PanelError("Client not initialized. Use 'async with PanelClient(...) as client:'")
        return self._dispatcher

    @property
    def scheduler(self) -> PollScheduler:
        if self._scheduler is None:
            raise PanelError("Client not initialized. Use 'async with PanelClient(...) as client:'")
        return self._scheduler

    # ------------------------------------------------------------------
    # Poll loop
    # ------------------------------------------------------------------

    def start(self) -> asyncio.Task[None]:
        """Start the poll loop in the background (idempotent)."""
        scheduler = self.scheduler
        if self._poll_task is None or self._poll_task.done():
            assert self._loop is not None  # noqa: S101
            self._poll_task = self._loop.create_task(scheduler.run(), name="pyhapanel-poll")
        return self._poll_task

    async def stop(self) -> None:
        """Stop the poll loop, letting an in-flight poll finish."""
        if self._scheduler is not None:
            self._scheduler.stop()
        task = self._poll_task
        self._poll_task = None
        if task is not None:
            await task

    async def run(self) -> None:
        """Run the poll loop until :meth:`stop` is called."""
        await self.start()

    # ------------------------------------------------------------------
    # Command path
    # ------------------------------------------------------------------

    def submit_command(self, command: DeviceCommand) -> concurrent.futures.Future[CommandResult]:
        """Schedule *command* on the client loop.  Safe to call from any thread."""
        loop = self._loop
        if loop is None or loop.is_closed():
            raise PanelError("Client not running; command dropped")
        future = asyncio.run_coroutine_threadsafe(self.execute_command(command), loop)
        self._inflight.add(future)
        future.add_done_callback(self._inflight.discard)
        return future

    async def execute_command(self, command: DeviceCommand) -> CommandResult:
        """Send *command* and record its values in the device on success."""
        async with self._command_lock:
            result = await self.dispatcher.execute(command)
            if result.success:
                try:
                    await asyncio.to_thread(self._reconciler.record_command, command)
                except PanelLockTimeoutError:
                    _logger.debug("UI lock busy; %s will be refreshed by the next poll", command.entity_id)
        if self._on_command_result is not None:
            try:
                self._on_command_result(result)
            except Exception:
                _logger.debug("on_command_result callback failed", exc_info=True)
        return result

    async def drain_commands(self) -> None:
        """Wait for every submitted command to finish."""
        pending = [asyncio.wrap_future(future) for future in list(self._inflight)]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
