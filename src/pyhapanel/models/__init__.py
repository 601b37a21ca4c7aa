"""Data models for pyhapanel."""

from pyhapanel.models._base import EntityModel, PanelBaseModel, PanelStateModel
from pyhapanel.models.command import CommandFailure, CommandResult, DeviceCommand
from pyhapanel.models.device import Cover, Device, DeviceKind, DimmableLight, SimpleLight, default_devices
from pyhapanel.models.requests import CoverPositionRequest, LightTurnOnRequest, ServiceRequest
from pyhapanel.models.snapshot import PolledSnapshot

__all__ = [
    "CommandFailure",
    "CommandResult",
    "Cover",
    "CoverPositionRequest",
    "Device",
    "DeviceCommand",
    "DeviceKind",
    "DimmableLight",
    "EntityModel",
    "LightTurnOnRequest",
    "PanelBaseModel",
    "PanelStateModel",
    "PolledSnapshot",
    "ServiceRequest",
    "SimpleLight",
    "default_devices",
]
