"""Polled state snapshot."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from pyhapanel._constants import BRIGHTNESS_MAX, BRIGHTNESS_MIN, POSITION_MAX, POSITION_MIN
from pyhapanel.models._base import EntityModel


class PolledSnapshot(EntityModel):
    """Fields one state response could populate.

    ``None`` means the field was absent, ``null`` or cut off; it must never
    overwrite a previously known value.
    """

    on: bool | None = None
    brightness: int | None = Field(default=None, ge=BRIGHTNESS_MIN, le=BRIGHTNESS_MAX)
    color_temp_kelvin: int | None = Field(default=None, gt=0)
    position: int | None = Field(default=None, ge=POSITION_MIN, le=POSITION_MAX)

    def present_fields(self) -> dict[str, Any]:
        """Return only the fields that carry a value."""
        return self.model_dump(exclude={"entity_id"}, exclude_none=True)

    @property
    def is_empty(self) -> bool:
        return not self.present_fields()
