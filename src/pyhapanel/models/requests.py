"""Pydantic request bodies for service calls.

These models provide a consistent "validate → normalize → serialize" flow.
Optional fields left as ``None`` are dropped from the body, which the remote
store reads as "leave unchanged".
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from pyhapanel._constants import BRIGHTNESS_MAX, BRIGHTNESS_MIN, POSITION_MAX, POSITION_MIN
from pyhapanel.models._base import EntityModel


class ServiceRequest(EntityModel):
    """Body containing only the target entity."""

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class LightTurnOnRequest(ServiceRequest):
    """``light/turn_on`` with optional brightness and color temperature.

    Negative brightness and non-positive color temperature mean "not set".
    """

    brightness: int | None = Field(default=None, le=BRIGHTNESS_MAX)
    color_temp_kelvin: int | None = None

    @field_validator("brightness")
    @classmethod
    def _drop_unset_brightness(cls, value: int | None) -> int | None:
        if value is None or value < BRIGHTNESS_MIN:
            return None
        return value

    @field_validator("color_temp_kelvin")
    @classmethod
    def _drop_unset_kelvin(cls, value: int | None) -> int | None:
        if value is None or value <= 0:
            return None
        return value


class CoverPositionRequest(ServiceRequest):
    """``cover/set_cover_position``."""

    position: int = Field(ge=POSITION_MIN, le=POSITION_MAX)
