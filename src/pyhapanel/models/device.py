"""Device models.

The device set is fixed: each device is one tagged variant selected by
``kind``.  Value fields start as ``None`` (unknown until the first poll or
gesture) and are only mutated by the reconciler.
"""

from __future__ import annotations

import enum
from typing import Literal

from pydantic import Field, field_validator

from pyhapanel._constants import (
    BRIGHTNESS_MAX,
    BRIGHTNESS_MIN,
    KELVIN_MAX,
    KELVIN_MIN,
    POSITION_MAX,
    POSITION_MIN,
)
from pyhapanel.models._base import PanelStateModel, normalize_entity_id


class DeviceKind(enum.StrEnum):
    """Device variants supported by the panel."""

    SIMPLE_LIGHT = "simple_light"
    DIMMABLE_LIGHT = "dimmable_light"
    COVER = "cover"


class _DeviceBase(PanelStateModel):
    entity_id: str
    name: str = ""

    @field_validator("entity_id")
    @classmethod
    def _check_entity_id(cls, value: str) -> str:
        return normalize_entity_id(value)

    @property
    def domain(self) -> str:
        return self.entity_id.split(".", 1)[0]


class SimpleLight(_DeviceBase):
    """On/off light."""

    kind: Literal[DeviceKind.SIMPLE_LIGHT] = DeviceKind.SIMPLE_LIGHT
    on: bool | None = None


class DimmableLight(_DeviceBase):
    """Dimmable light, optionally color-temperature tunable.

    ``color_temp_kelvin`` is ``None`` while unknown, and always ``None`` when
    ``supports_color_temp`` is false.
    """

    kind: Literal[DeviceKind.DIMMABLE_LIGHT] = DeviceKind.DIMMABLE_LIGHT
    on: bool | None = None
    brightness: int | None = Field(default=None, ge=BRIGHTNESS_MIN, le=BRIGHTNESS_MAX)
    color_temp_kelvin: int | None = Field(default=None, ge=KELVIN_MIN, le=KELVIN_MAX)
    supports_color_temp: bool = True


class Cover(_DeviceBase):
    """Positionable cover (0 = closed, 100 = open)."""

    kind: Literal[DeviceKind.COVER] = DeviceKind.COVER
    position: int | None = Field(default=None, ge=POSITION_MIN, le=POSITION_MAX)


Device = SimpleLight | DimmableLight | Cover
"""Any device variant; dispatch on ``kind`` or ``isinstance``."""


def default_devices() -> list[Device]:
    """Return fresh instances of the panel's device set, in poll order."""
    return [
        SimpleLight(entity_id="light.guldlampan", name="Guldlampan"),
        DimmableLight(entity_id="light.videolampor", name="Videolampor"),
        DimmableLight(entity_id="light.iris_golvlampa", name="Iris", supports_color_temp=False),
        Cover(entity_id="cover.persienn_arbetsrum", name="Solskydd"),
    ]
