"""Reconciler: the only writer of device state and widget state.

Two kinds of transitions arrive here:

* **Snapshots** from the poll loop.  They are applied with the UI lock held
  (bounded wait) and the :class:`SyncGuard` set, so widget change events
  fired by the writes are not echoed back as commands.  Absent fields are
  left untouched.
* **Gestures** from the UI thread.  When the guard is clear, the handler
  reads every sibling control of the device and emits exactly one
  :class:`DeviceCommand` describing the full desired state.  The device
  values themselves are only updated once the command succeeded
  (:meth:`Reconciler.record_command`); a failed command is corrected by the
  next poll.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from pyhapanel._constants import brightness_to_percent, clamp_kelvin, dial_to_kelvin, kelvin_to_dial
from pyhapanel.exceptions import PanelError
from pyhapanel.models.command import DeviceCommand
from pyhapanel.models.device import Cover, Device, DimmableLight, SimpleLight
from pyhapanel.models.snapshot import PolledSnapshot
from pyhapanel.state.guard import SyncGuard
from pyhapanel.state.lock import UiLock
from pyhapanel.state.store import SyncState
from pyhapanel.surface import Control, WidgetSurface

_logger = logging.getLogger(__name__)

CommandSink = Callable[[DeviceCommand], object]


def _percent_label(brightness: int) -> str:
    return f"{brightness_to_percent(brightness)}%"


class Reconciler:
    """Applies snapshots and gestures to the shared device/widget state."""

    def __init__(
        self,
        state: SyncState,
        surface: WidgetSurface,
        lock: UiLock,
        command_sink: CommandSink,
        *,
        lock_timeout: float = 0.1,
    ) -> None:
        self._state = state
        self._surface = surface
        self._lock = lock
        self._command_sink = command_sink
        self._lock_timeout = lock_timeout
        self.guard = SyncGuard()

    @property
    def state(self) -> SyncState:
        return self._state

    # ------------------------------------------------------------------
    # Snapshot path (poll loop)
    # ------------------------------------------------------------------

    def apply_snapshot(self, snapshot: PolledSnapshot) -> None:
        """Apply every present field of *snapshot*.

        Raises
        ------
        PanelLockTimeoutError
            The UI lock was busy; nothing was applied.
        PanelUnknownDeviceError
            The snapshot is for a device outside the table.
        """
        device = self._state.get(snapshot.entity_id)
        with self._lock.hold(self._lock_timeout), self.guard.suppress_outbound():
            if isinstance(device, Cover):
                self.apply_cover(device.entity_id, snapshot.position)
            else:
                if snapshot.on is not None:
                    self.apply_switch(device.entity_id, snapshot.on)
                if isinstance(device, DimmableLight):
                    self.apply_dimmable(device.entity_id, snapshot.brightness, snapshot.color_temp_kelvin)
        _logger.debug("Applied snapshot %s %s", snapshot.entity_id, snapshot.present_fields())

    # The three methods below are the UI-facing contract: callers hold the lock.

    def apply_switch(self, entity_id: str, on: bool) -> None:
        device = self._state.get(entity_id)
        if isinstance(device, Cover):
            raise TypeError(f"{entity_id} has no switch")
        device.on = on
        self._surface.set_switch(entity_id, on)

    def apply_dimmable(
        self,
        entity_id: str,
        brightness: int | None = None,
        color_temp_kelvin: int | None = None,
    ) -> None:
        device = self._state.get(entity_id)
        if not isinstance(device, DimmableLight):
            raise TypeError(f"{entity_id} is not dimmable")

        if brightness is not None and brightness >= 0:
            device.brightness = brightness
            self._surface.set_slider(entity_id, Control.BRIGHTNESS, brightness)
            self._surface.set_label(entity_id, Control.BRIGHTNESS, _percent_label(brightness))

        if color_temp_kelvin is not None and color_temp_kelvin > 0 and device.supports_color_temp:
            kelvin = clamp_kelvin(color_temp_kelvin)
            device.color_temp_kelvin = kelvin
            self._surface.set_slider(entity_id, Control.COLOR_TEMP, kelvin_to_dial(kelvin))
            self._surface.set_label(entity_id, Control.COLOR_TEMP, f"{kelvin}K")

    def apply_cover(self, entity_id: str, position: int | None) -> None:
        device = self._state.get(entity_id)
        if not isinstance(device, Cover):
            raise TypeError(f"{entity_id} is not a cover")
        if position is None or position < 0:
            return
        device.position = position
        self._surface.set_slider(entity_id, Control.POSITION, position)
        self._surface.set_label(entity_id, Control.POSITION, f"{position}%")

    # ------------------------------------------------------------------
    # Gesture path (UI thread)
    # ------------------------------------------------------------------

    def on_switch_toggled(self, entity_id: str, on: bool) -> None:
        with self._lock.hold():
            device = self._state.get(entity_id)
            if self.guard.active:
                _logger.debug("Switch event for %s during snapshot; not sent", entity_id)
                return
            if isinstance(device, Cover):
                _logger.debug("Ignoring switch event for cover %s", entity_id)
                return
            self._emit(self._desired_state(device, {Control.SWITCH: on}))

    def on_slider_released(self, entity_id: str, control: Control, value: int) -> None:
        with self._lock.hold():
            device = self._state.get(entity_id)
            self._refresh_label(entity_id, control, value)
            if self.guard.active:
                _logger.debug("Slider event for %s/%s during snapshot; not sent", entity_id, control)
                return
            if isinstance(device, SimpleLight):
                _logger.debug("Ignoring slider event for on/off light %s", entity_id)
                return
            self._emit(self._desired_state(device, {control: value}))

    def _refresh_label(self, entity_id: str, control: Control, value: int) -> None:
        # Labels are visual only, so they follow the slider even during a snapshot.
        if control == Control.BRIGHTNESS:
            self._surface.set_label(entity_id, control, _percent_label(value))
        elif control == Control.COLOR_TEMP:
            self._surface.set_label(entity_id, control, f"{dial_to_kelvin(value)}K")
        elif control == Control.POSITION:
            self._surface.set_label(entity_id, control, f"{value}%")

    def _desired_state(self, device: Device, overrides: dict[Control, int | bool]) -> DeviceCommand:
        """Build the full desired state from all sibling controls of *device*."""
        entity_id = device.entity_id

        def slider(control: Control) -> int:
            value = overrides.get(control)
            return int(value) if value is not None else self._surface.get_slider(entity_id, control)

        if isinstance(device, Cover):
            return DeviceCommand(entity_id=entity_id, kind=device.kind, position=slider(Control.POSITION))

        switch = overrides.get(Control.SWITCH)
        on = bool(switch) if switch is not None else self._surface.get_switch(entity_id)
        if isinstance(device, SimpleLight):
            return DeviceCommand(entity_id=entity_id, kind=device.kind, on=on)

        kelvin = dial_to_kelvin(slider(Control.COLOR_TEMP)) if device.supports_color_temp else None
        return DeviceCommand(
            entity_id=entity_id,
            kind=device.kind,
            on=on,
            brightness=slider(Control.BRIGHTNESS),
            color_temp_kelvin=kelvin,
        )

    def _emit(self, command: DeviceCommand) -> None:
        try:
            self._command_sink(command)
        except PanelError as exc:
            _logger.warning("Could not submit command for %s: %s", command.entity_id, exc)

    # ------------------------------------------------------------------
    # Command confirmation
    # ------------------------------------------------------------------

    def record_command(self, command: DeviceCommand) -> None:
        """Store the values of a successfully sent command in the device.

        Widgets already show the user's values and are not touched.

        Raises
        ------
        PanelLockTimeoutError
            The UI lock was busy; the next poll brings the device up to date.
        """
        device = self._state.get(command.entity_id)
        with self._lock.hold(self._lock_timeout):
            if isinstance(device, Cover):
                if command.position is not None:
                    device.position = command.position
                return
            if command.on is not None:
                device.on = command.on
            if isinstance(device, DimmableLight) and command.on:
                if command.brightness is not None and command.brightness >= 0:
                    device.brightness = command.brightness
                if device.supports_color_temp and command.color_temp_kelvin is not None and command.color_temp_kelvin > 0:
                    device.color_temp_kelvin = clamp_kelvin(command.color_temp_kelvin)
