"""In-memory device table.

The device set is fixed for the process lifetime: devices are registered
once, in poll order, and never removed.  Only the reconciler mutates the
device values, and only while holding the UI lock.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from pyhapanel.exceptions import PanelConfigError, PanelUnknownDeviceError
from pyhapanel.models.device import Device, default_devices


class SyncState:
    """Lookup table from entity id to device variant."""

    def __init__(self, devices: Iterable[Device] | None = None) -> None:
        self._devices: dict[str, Device] = {}
        for device in default_devices() if devices is None else devices:
            if device.entity_id in self._devices:
                raise PanelConfigError(f"Duplicate device: {device.entity_id!r}")
            self._devices[device.entity_id] = device
        if not self._devices:
            raise PanelConfigError("At least one device is required")

    def get(self, entity_id: str) -> Device:
        device = self._devices.get(entity_id)
        if device is None:
            raise PanelUnknownDeviceError(entity_id)
        return device

    @property
    def entity_ids(self) -> tuple[str, ...]:
        """Entity ids in registration (poll) order."""
        return tuple(self._devices)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._devices

    def __iter__(self) -> Iterator[Device]:
        return iter(self._devices.values())

    def __len__(self) -> int:
        return len(self._devices)

    def as_dict(self) -> dict[str, dict[str, Any]]:
        """Plain copy of every device, for display and debugging."""
        return {entity_id: device.model_dump(mode="json") for entity_id, device in self._devices.items()}
