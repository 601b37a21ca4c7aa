"""Widget surface interface and a headless implementation.

The engine never talks to a widget toolkit directly.  A surface exposes
imperative setters/getters for switches, sliders and their companion labels,
and routes user input events to the handlers registered with :meth:`bind`.
Widgets are addressed by ``(entity_id, control)``.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from typing import Protocol

_logger = logging.getLogger(__name__)


class Control(enum.StrEnum):
    """Controls a device card can carry."""

    SWITCH = "switch"
    BRIGHTNESS = "brightness"
    COLOR_TEMP = "color_temp"
    POSITION = "position"


SwitchHandler = Callable[[str, bool], None]
SliderHandler = Callable[[str, Control, int], None]

# Slider values shown before the first poll.
DEFAULT_SLIDER_VALUES: dict[Control, int] = {
    Control.BRIGHTNESS: 128,
    Control.COLOR_TEMP: 50,
    Control.POSITION: 0,
}
DEFAULT_LABELS: dict[Control, str] = {
    Control.BRIGHTNESS: "--%",
    Control.COLOR_TEMP: "--K",
    Control.POSITION: "--%",
}


class WidgetSurface(Protocol):
    """Rendering surface used by the reconciler.

    Implementations call the bound handlers for *user* input only:
    ``on_switch`` when a switch is toggled, ``on_slider`` when a slider is
    released.  All calls happen while the UI lock is held.
    """

    def bind(self, on_switch: SwitchHandler, on_slider: SliderHandler) -> None: ...

    def set_switch(self, entity_id: str, on: bool) -> None: ...

    def get_switch(self, entity_id: str) -> bool: ...

    def set_slider(self, entity_id: str, control: Control, value: int) -> None: ...

    def get_slider(self, entity_id: str, control: Control) -> int: ...

    def set_label(self, entity_id: str, control: Control, text: str) -> None: ...


class MemorySurface:
    """Headless widget surface backed by dictionaries.

    Parameters
    ----------
    notify_on_set
        Also fire the bound handlers when values are set programmatically,
        the way some toolkits emit change events for every value change.
    """

    def __init__(self, *, notify_on_set: bool = False) -> None:
        self._notify_on_set = notify_on_set
        self._switches: dict[str, bool] = {}
        self._sliders: dict[tuple[str, Control], int] = {}
        self._labels: dict[tuple[str, Control], str] = {}
        self._on_switch: SwitchHandler | None = None
        self._on_slider: SliderHandler | None = None

    def bind(self, on_switch: SwitchHandler, on_slider: SliderHandler) -> None:
        self._on_switch = on_switch
        self._on_slider = on_slider

    # ------------------------------------------------------------------
    # Imperative widget state
    # ------------------------------------------------------------------

    def set_switch(self, entity_id: str, on: bool) -> None:
        self._switches[entity_id] = on
        if self._notify_on_set and self._on_switch is not None:
            self._on_switch(entity_id, on)

    def get_switch(self, entity_id: str) -> bool:
        return self._switches.get(entity_id, False)

    def set_slider(self, entity_id: str, control: Control, value: int) -> None:
        self._sliders[(entity_id, control)] = value
        if self._notify_on_set and self._on_slider is not None:
            self._on_slider(entity_id, control, value)

    def get_slider(self, entity_id: str, control: Control) -> int:
        return self._sliders.get((entity_id, control), DEFAULT_SLIDER_VALUES.get(control, 0))

    def set_label(self, entity_id: str, control: Control, text: str) -> None:
        self._labels[(entity_id, control)] = text

    def get_label(self, entity_id: str, control: Control) -> str:
        return self._labels.get((entity_id, control), DEFAULT_LABELS.get(control, ""))

    # ------------------------------------------------------------------
    # Simulated user input
    # ------------------------------------------------------------------

    def toggle_switch(self, entity_id: str, on: bool) -> None:
        """Simulate the user flipping a switch."""
        self._switches[entity_id] = on
        if self._on_switch is None:
            _logger.debug("Switch %s toggled with no handler bound", entity_id)
            return
        self._on_switch(entity_id, on)

    def release_slider(self, entity_id: str, control: Control, value: int) -> None:
        """Simulate the user releasing a slider at *value*."""
        self._sliders[(entity_id, control)] = value
        if self._on_slider is None:
            _logger.debug("Slider %s/%s released with no handler bound", entity_id, control)
            return
        self._on_slider(entity_id, control, value)
