"""Internal constants and value conversions shared across the library."""

DEFAULT_BASE_URL = "http://homeassistant.local:8123/api"
USER_AGENT = "pyhapanel/0.1"
RESPONSE_BUFFER_SIZE = 1024
HTTP_OK = 200

# ------------------------------------------------------------------
# Brightness  (wire 0-255 → display percent 0-100)
# ------------------------------------------------------------------

BRIGHTNESS_MIN = 0
BRIGHTNESS_MAX = 255
PERCENT_MAX = 100


def brightness_to_percent(brightness: int) -> int:
    """Convert a native brightness byte (0-255) to a display percentage (0-100).

    Truncates toward zero, so ``128`` maps to ``50``.

    Raises :class:`ValueError` if *brightness* is outside 0-255.
    """
    value = int(brightness)
    if not BRIGHTNESS_MIN <= value <= BRIGHTNESS_MAX:
        raise ValueError(f"brightness must be between {BRIGHTNESS_MIN} and {BRIGHTNESS_MAX}, got {value}")
    return value * PERCENT_MAX // BRIGHTNESS_MAX


# ------------------------------------------------------------------
# Color temperature  (Kelvin 2900-7000 ↔ dial 0-100)
# ------------------------------------------------------------------

KELVIN_MIN = 2900
KELVIN_MAX = 7000
DIAL_MIN = 0
DIAL_MAX = 100
_KELVIN_SPAN = KELVIN_MAX - KELVIN_MIN  # 4100


def clamp_kelvin(kelvin: int) -> int:
    """Clamp a color temperature into the supported 2900-7000 K range."""
    return max(KELVIN_MIN, min(KELVIN_MAX, int(kelvin)))


def kelvin_to_dial(kelvin: int) -> int:
    """Convert a color temperature in Kelvin to a dial position (0-100).

    Out-of-range temperatures are absorbed by clamping the result.
    """
    dial = (int(kelvin) - KELVIN_MIN) * DIAL_MAX // _KELVIN_SPAN
    return max(DIAL_MIN, min(DIAL_MAX, dial))


def dial_to_kelvin(dial: int) -> int:
    """Convert a dial position (0-100) to a color temperature in Kelvin.

    Raises :class:`ValueError` if *dial* is outside 0-100.
    """
    value = int(dial)
    if not DIAL_MIN <= value <= DIAL_MAX:
        raise ValueError(f"dial must be between {DIAL_MIN} and {DIAL_MAX}, got {value}")
    return KELVIN_MIN + value * _KELVIN_SPAN // DIAL_MAX


# ------------------------------------------------------------------
# Cover position
# ------------------------------------------------------------------

POSITION_MIN = 0  # fully closed
POSITION_MAX = 100  # fully open
