"""Turn a buffered state response into a :class:`PolledSnapshot`.

Each device kind reads only the fields it can render.  Values outside a
field's valid range are treated like ``null``: dropped, never applied.
"""

from __future__ import annotations

import logging

from pyhapanel._constants import BRIGHTNESS_MAX, BRIGHTNESS_MIN, POSITION_MAX, POSITION_MIN
from pyhapanel.exceptions import PanelMalformedResponseError
from pyhapanel.ingestion.extract import BufferLike, extract_field, extract_state_on
from pyhapanel.models.device import Cover, Device, DimmableLight, SimpleLight
from pyhapanel.models.snapshot import PolledSnapshot

_logger = logging.getLogger(__name__)


def _in_range(name: str, value: int | None, low: int, high: int) -> int | None:
    if value is None:
        return None
    if low <= value <= high:
        return value
    _logger.debug("Dropping out-of-range %s=%d", name, value)
    return None


def build_snapshot(device: Device, buffer: BufferLike, *, endpoint: str = "") -> PolledSnapshot:
    """Extract the fields relevant to *device* from *buffer*.

    Raises
    ------
    PanelMalformedResponseError
        When not a single usable field was found.
    """
    if isinstance(device, SimpleLight):
        snapshot = PolledSnapshot(entity_id=device.entity_id, on=extract_state_on(buffer))
    elif isinstance(device, DimmableLight):
        kelvin: int | None = None
        if device.supports_color_temp:
            kelvin = extract_field(buffer, "color_temp_kelvin")
            if kelvin is not None and kelvin <= 0:
                kelvin = None
        snapshot = PolledSnapshot(
            entity_id=device.entity_id,
            on=extract_state_on(buffer),
            brightness=_in_range("brightness", extract_field(buffer, "brightness"), BRIGHTNESS_MIN, BRIGHTNESS_MAX),
            color_temp_kelvin=kelvin,
        )
    elif isinstance(device, Cover):
        position = extract_field(buffer, "current_position")
        snapshot = PolledSnapshot(
            entity_id=device.entity_id,
            position=_in_range("current_position", position, POSITION_MIN, POSITION_MAX),
        )
    else:  # pragma: no cover
        raise TypeError(f"Unsupported device type: {type(device).__name__}")

    if snapshot.is_empty:
        raise PanelMalformedResponseError(
            f"No usable fields for {device.entity_id}",
            endpoint=endpoint,
        )
    return snapshot
