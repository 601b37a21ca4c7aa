"""pyhapanel - State synchronization engine for a smart-home control panel."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyhapanel")
except PackageNotFoundError:
    __version__ = "0+local"
from pyhapanel._constants import brightness_to_percent, dial_to_kelvin, kelvin_to_dial
from pyhapanel.client import PanelClient
from pyhapanel.config import PanelConfig
from pyhapanel.dispatcher import CommandDispatcher
from pyhapanel.exceptions import (
    PanelConfigError,
    PanelError,
    PanelLockTimeoutError,
    PanelMalformedResponseError,
    PanelRemoteRejectedError,
    PanelTransportError,
    PanelUnknownDeviceError,
)
from pyhapanel.ingestion.buffer import ResponseBuffer
from pyhapanel.ingestion.extract import extract_field, extract_state, extract_state_on
from pyhapanel.models import (
    CommandFailure,
    CommandResult,
    Cover,
    Device,
    DeviceCommand,
    DeviceKind,
    DimmableLight,
    PolledSnapshot,
    SimpleLight,
    default_devices,
)
from pyhapanel.scheduler import PollScheduler
from pyhapanel.state.guard import SyncGuard
from pyhapanel.state.lock import UiLock
from pyhapanel.state.reconciler import Reconciler
from pyhapanel.state.store import SyncState
from pyhapanel.surface import Control, MemorySurface, WidgetSurface

__all__ = [
    "__version__",
    "CommandDispatcher",
    "CommandFailure",
    "CommandResult",
    "Control",
    "Cover",
    "Device",
    "DeviceCommand",
    "DeviceKind",
    "DimmableLight",
    "MemorySurface",
    "PanelClient",
    "PanelConfig",
    "PanelConfigError",
    "PanelError",
    "PanelLockTimeoutError",
    "PanelMalformedResponseError",
    "PanelRemoteRejectedError",
    "PanelTransportError",
    "PanelUnknownDeviceError",
    "PollScheduler",
    "PolledSnapshot",
    "Reconciler",
    "ResponseBuffer",
    "SimpleLight",
    "SyncGuard",
    "SyncState",
    "UiLock",
    "WidgetSurface",
    "brightness_to_percent",
    "default_devices",
    "dial_to_kelvin",
    "extract_field",
    "extract_state",
    "extract_state_on",
    "kelvin_to_dial",
]
