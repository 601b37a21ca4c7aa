from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import threading

import pytest

from conftest import FakeBackend
from pyhapanel.config import PanelConfig
from pyhapanel.models import DeviceCommand
from pyhapanel.scheduler import PollScheduler
from pyhapanel.state.lock import UiLock
from pyhapanel.state.reconciler import Reconciler
from pyhapanel.state.store import SyncState
from pyhapanel.surface import Control, MemorySurface


@dataclasses.dataclass
class _Setup:
    scheduler: PollScheduler
    state: SyncState
    surface: MemorySurface
    lock: UiLock
    commands: list[DeviceCommand]


def _make(config: PanelConfig, backend: FakeBackend) -> _Setup:
    state = SyncState()
    surface = MemorySurface(notify_on_set=True)
    lock = UiLock()
    commands: list[DeviceCommand] = []
    reconciler = Reconciler(state, surface, lock, commands.append, lock_timeout=config.lock_timeout)
    surface.bind(reconciler.on_switch_toggled, reconciler.on_slider_released)
    return _Setup(PollScheduler(config, backend, state, reconciler), state, surface, lock, commands)


def _seed(backend: FakeBackend) -> None:
    backend.set_state("light.guldlampan", {"state": "on", "attributes": {}})
    backend.set_state(
        "light.videolampor",
        {"state": "on", "attributes": {"brightness": 128, "color_temp_kelvin": 4000}},
    )
    backend.set_state("light.iris_golvlampa", {"state": "off", "attributes": {"brightness": None}})
    backend.set_state("cover.persienn_arbetsrum", {"state": "open", "attributes": {"current_position": 60}})


@pytest.mark.asyncio
async def test_cycle_polls_every_device_in_order(config: PanelConfig, backend: FakeBackend) -> None:
    _seed(backend)
    setup = _make(config, backend)

    applied = await setup.scheduler.run_cycle()

    assert applied == 4
    assert backend.paths == [f"/states/{entity_id}" for entity_id in setup.state.entity_ids]
    assert all(request.method == "GET" for request in backend.requests)
    assert backend.timeouts == [config.request_timeout] * 4
    assert setup.state.get("light.guldlampan").on is True
    assert setup.state.get("light.videolampor").brightness == 128
    assert setup.state.get("light.iris_golvlampa").on is False
    assert setup.state.get("cover.persienn_arbetsrum").position == 60
    # Nothing polled is ever echoed back as a command.
    assert setup.commands == []


@pytest.mark.asyncio
async def test_failed_polls_do_not_stop_the_cycle(config: PanelConfig, backend: FakeBackend) -> None:
    _seed(backend)
    backend.fail_paths.add("/states/light.videolampor")
    backend.status_by_path["/states/light.iris_golvlampa"] = 500
    setup = _make(config, backend)

    applied = await setup.scheduler.run_cycle()

    assert applied == 2
    assert len(backend.requests) == 4
    assert setup.state.get("light.videolampor").on is None
    assert setup.state.get("light.iris_golvlampa").on is None
    assert setup.state.get("cover.persienn_arbetsrum").position == 60


@pytest.mark.asyncio
async def test_unusable_response_is_discarded(config: PanelConfig, backend: FakeBackend) -> None:
    backend.states["cover.persienn_arbetsrum"] = b'{"state":"unknown","attributes":{"current_position":null}}'
    setup = _make(config, backend)

    assert await setup.scheduler.poll_once("cover.persienn_arbetsrum") is None
    assert setup.state.get("cover.persienn_arbetsrum").position is None


@pytest.mark.asyncio
async def test_buffer_is_reset_between_polls(config: PanelConfig, backend: FakeBackend) -> None:
    _seed(backend)
    setup = _make(config, backend)

    await setup.scheduler.poll_once("light.videolampor")
    snapshot = await setup.scheduler.poll_once("light.guldlampan")

    assert snapshot is not None
    assert setup.scheduler.buffer.payload() == backend.states["light.guldlampan"]


@pytest.mark.asyncio
async def test_truncated_response_keeps_fields_that_fit(config: PanelConfig, backend: FakeBackend) -> None:
    small = dataclasses.replace(config, response_buffer_size=48)
    body = b'{"state":"on","attributes":{"friendly_name":"Videolampor","brightness":200}}'
    backend.states["light.videolampor"] = body
    setup = _make(small, backend)

    snapshot = await setup.scheduler.poll_once("light.videolampor")

    assert setup.scheduler.buffer.truncated is True
    assert snapshot is not None
    assert snapshot.on is True
    assert snapshot.brightness is None
    assert setup.state.get("light.videolampor").brightness is None


@pytest.mark.asyncio
async def test_busy_ui_lock_drops_the_poll(config: PanelConfig, backend: FakeBackend) -> None:
    _seed(backend)
    setup = _make(config, backend)
    held = threading.Event()
    release = threading.Event()

    def holder() -> None:
        with setup.lock:
            held.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    assert held.wait(5)
    try:
        snapshot = await setup.scheduler.poll_once("cover.persienn_arbetsrum")
    finally:
        release.set()
        thread.join()

    assert snapshot is None
    assert setup.state.get("cover.persienn_arbetsrum").position is None
    assert setup.surface.get_label("cover.persienn_arbetsrum", Control.POSITION) == "--%"


@pytest.mark.asyncio
async def test_unknown_device_is_not_polled(config: PanelConfig, backend: FakeBackend) -> None:
    setup = _make(config, backend)

    assert await setup.scheduler.poll_once("light.nowhere") is None
    assert backend.requests == []


@pytest.mark.asyncio
async def test_run_repeats_until_stopped(config: PanelConfig, backend: FakeBackend) -> None:
    _seed(backend)
    setup = _make(dataclasses.replace(config, poll_interval=0.01), backend)

    task = asyncio.create_task(setup.scheduler.run())

    async def two_cycles() -> None:
        while len(backend.requests) < 8:
            await asyncio.sleep(0.005)

    await asyncio.wait_for(two_cycles(), timeout=2)
    setup.scheduler.stop()
    await asyncio.wait_for(task, timeout=2)

    assert setup.scheduler.stopping is True
    assert backend.paths[:8] == [f"/states/{entity_id}" for entity_id in setup.state.entity_ids] * 2


@pytest.mark.asyncio
async def test_stop_during_startup_delay(config: PanelConfig, backend: FakeBackend) -> None:
    setup = _make(dataclasses.replace(config, startup_delay=30.0), backend)

    task = asyncio.create_task(setup.scheduler.run())
    await asyncio.sleep(0)
    setup.scheduler.stop()
    await asyncio.wait_for(task, timeout=2)

    assert backend.requests == []


@pytest.mark.asyncio
async def test_waiting_for_ui_lock_keeps_event_loop_running(config: PanelConfig, backend: FakeBackend) -> None:
    _seed(backend)
    setup = _make(dataclasses.replace(config, lock_timeout=0.3), backend)
    held = threading.Event()
    release = threading.Event()
    ticks = 0

    def holder() -> None:
        with setup.lock:
            held.set()
            release.wait(5)

    async def ticker() -> None:
        nonlocal ticks
        while True:
            await asyncio.sleep(0.01)
            ticks += 1

    thread = threading.Thread(target=holder)
    thread.start()
    assert held.wait(5)
    ticking = asyncio.create_task(ticker())
    try:
        snapshot = await setup.scheduler.poll_once("cover.persienn_arbetsrum")
    finally:
        release.set()
        thread.join()
        ticking.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await ticking

    assert snapshot is None
    assert ticks >= 5
