from __future__ import annotations

import asyncio

import pytest

from conftest import FakeBackend
from pyhapanel.client import PanelClient
from pyhapanel.config import PanelConfig
from pyhapanel.exceptions import PanelError
from pyhapanel.models import CommandResult, Cover, DeviceCommand, DeviceKind, DimmableLight
from pyhapanel.state.guard import SyncGuard
from pyhapanel.surface import Control, MemorySurface


class GuardRecordingSurface(MemorySurface):
    """Records the guard state every time a widget is written."""

    def __init__(self) -> None:
        super().__init__(notify_on_set=True)
        self.guard: SyncGuard | None = None
        self.observed: list[bool] = []

    def _observe(self) -> None:
        assert self.guard is not None
        self.observed.append(self.guard.active)

    def set_slider(self, entity_id: str, control: Control, value: int) -> None:
        self._observe()
        super().set_slider(entity_id, control, value)

    def set_label(self, entity_id: str, control: Control, text: str) -> None:
        self._observe()
        super().set_label(entity_id, control, text)


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_cover_poll_updates_position_and_label(config: PanelConfig, backend: FakeBackend) -> None:
    backend.states["cover.x"] = b'{"current_position":42}'
    surface = GuardRecordingSurface()

    async with PanelClient(config, surface, devices=[Cover(entity_id="cover.x")], transport=backend) as client:
        surface.guard = client.reconciler.guard
        assert client.reconciler.guard.active is False

        snapshot = await client.scheduler.poll_once("cover.x")

        assert snapshot is not None
        assert client.state.get("cover.x").position == 42
        assert surface.get_slider("cover.x", Control.POSITION) == 42
        assert surface.get_label("cover.x", Control.POSITION) == "42%"
        assert surface.observed and all(surface.observed)
        assert client.reconciler.guard.active is False

    assert backend.posts() == []


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_set_dimmable_success_and_rejection(config: PanelConfig, backend: FakeBackend) -> None:
    async with PanelClient(config, devices=[DimmableLight(entity_id="light.y")], transport=backend) as client:
        ok = await client.dispatcher.set_dimmable("light.y", True, 200, 4500)
        assert ok.success is True

        backend.status_by_path["/services/light/turn_on"] = 500
        failed = await client.dispatcher.set_dimmable("light.y", True, 200, 4500)
        assert failed.success is False

        device = client.state.get("light.y")
        assert (device.on, device.brightness, device.color_temp_kelvin) == (None, None, None)


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_command_updates_device_only_on_success(config: PanelConfig, backend: FakeBackend) -> None:
    results: list[CommandResult] = []
    command = DeviceCommand(
        entity_id="light.y",
        kind=DeviceKind.DIMMABLE_LIGHT,
        on=True,
        brightness=200,
        color_temp_kelvin=4500,
    )

    async with PanelClient(
        config,
        devices=[DimmableLight(entity_id="light.y")],
        transport=backend,
        on_command_result=results.append,
    ) as client:
        backend.status_by_path["/services/light/turn_on"] = 500
        result = await client.execute_command(command)
        assert result.success is False
        assert client.state.get("light.y").brightness is None

        backend.status_by_path["/services/light/turn_on"] = 200
        result = await client.execute_command(command)
        assert result.success is True
        device = client.state.get("light.y")
        assert (device.on, device.brightness, device.color_temp_kelvin) == (True, 200, 4500)

    assert [r.success for r in results] == [False, True]


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_gestures_from_ui_thread(config: PanelConfig, backend: FakeBackend) -> None:
    surface = MemorySurface()

    async with PanelClient(config, surface, transport=backend) as client:
        await asyncio.to_thread(surface.toggle_switch, "light.videolampor", True)
        await client.drain_commands()
        await asyncio.to_thread(surface.release_slider, "light.videolampor", Control.BRIGHTNESS, 200)
        await client.drain_commands()

        device = client.state.get("light.videolampor")
        assert (device.on, device.brightness, device.color_temp_kelvin) == (True, 200, 4950)

    assert backend.posts() == [
        (
            "/services/light/turn_on",
            {"entity_id": "light.videolampor", "brightness": 128, "color_temp_kelvin": 4950},
        ),
        (
            "/services/light/turn_on",
            {"entity_id": "light.videolampor", "brightness": 200, "color_temp_kelvin": 4950},
        ),
    ]


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_poll_loop_never_echoes_commands(config: PanelConfig, backend: FakeBackend) -> None:
    backend.set_state("light.guldlampan", {"state": "on"})
    backend.set_state("light.videolampor", {"state": "on", "attributes": {"brightness": 10, "color_temp_kelvin": 3000}})
    backend.set_state("light.iris_golvlampa", {"state": "on", "attributes": {"brightness": 20}})
    backend.set_state("cover.persienn_arbetsrum", {"state": "closed", "attributes": {"current_position": 0}})
    surface = MemorySurface(notify_on_set=True)

    async with PanelClient(config, surface, transport=backend) as client:
        client.start()

        async def first_cycle() -> None:
            while len(backend.requests) < 4:
                await asyncio.sleep(0.005)

        await asyncio.wait_for(first_cycle(), timeout=2)
        await client.stop()
        await client.drain_commands()

        assert client.state.get("light.iris_golvlampa").brightness == 20
        assert surface.get_label("light.videolampor", Control.BRIGHTNESS) == "3%"

    assert backend.posts() == []


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_client_requires_context(config: PanelConfig, backend: FakeBackend) -> None:
    client = PanelClient(config, transport=backend)

    with pytest.raises(PanelError, match="not initialized"):
        _ = client.dispatcher
    with pytest.raises(PanelError, match="not running"):
        client.submit_command(DeviceCommand(entity_id="light.guldlampan", kind=DeviceKind.SIMPLE_LIGHT, on=True))


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_commands_complete_in_submission_order(config: PanelConfig, backend: FakeBackend) -> None:
    backend.delays[b'"brightness":200'] = 0.2
    surface = MemorySurface()

    async with PanelClient(config, surface, transport=backend) as client:
        await asyncio.to_thread(surface.toggle_switch, "light.videolampor", True)
        await client.drain_commands()
        await asyncio.to_thread(surface.release_slider, "light.videolampor", Control.BRIGHTNESS, 200)
        await asyncio.to_thread(surface.release_slider, "light.videolampor", Control.BRIGHTNESS, 50)
        await client.drain_commands()

        assert client.state.get("light.videolampor").brightness == 50
        assert surface.get_slider("light.videolampor", Control.BRIGHTNESS) == 50

    assert [body["brightness"] for _, body in backend.posts()] == [128, 200, 50]
