"""Outbound command models.

:class:`DeviceCommand` is what a user gesture produces: the full desired
state of one device, built from all of its sibling controls.
:class:`CommandResult` is what the dispatcher reports back.
"""

from __future__ import annotations

import enum

from pydantic import Field, field_validator

from pyhapanel._constants import BRIGHTNESS_MAX, POSITION_MAX, POSITION_MIN
from pyhapanel.models._base import EntityModel, PanelBaseModel, normalize_entity_id
from pyhapanel.models.device import DeviceKind


class CommandFailure(enum.StrEnum):
    """Why a command failed.  Callers normally only look at ``success``."""

    TRANSPORT = "transport_failure"
    REJECTED = "remote_rejected"


class DeviceCommand(EntityModel):
    """Desired state of one device."""

    kind: DeviceKind
    on: bool | None = None
    brightness: int | None = Field(default=None, le=BRIGHTNESS_MAX)
    color_temp_kelvin: int | None = None
    position: int | None = Field(default=None, ge=POSITION_MIN, le=POSITION_MAX)


class CommandResult(PanelBaseModel):
    """Outcome of one service call.

    ``domain`` is the service domain that was called, which is not always the
    entity's own domain.
    """

    entity_id: str
    domain: str
    action: str
    success: bool
    status_code: int | None = None
    failure: CommandFailure | None = None
    message: str | None = None

    @field_validator("entity_id")
    @classmethod
    def _check_entity_id(cls, value: str) -> str:
        return normalize_entity_id(value)

    @classmethod
    def ok(cls, entity_id: str, domain: str, action: str) -> CommandResult:
        return cls(entity_id=entity_id, domain=domain, action=action, success=True, status_code=200)

    @classmethod
    def failed(
        cls,
        entity_id: str,
        domain: str,
        action: str,
        *,
        failure: CommandFailure,
        status_code: int | None = None,
        message: str | None = None,
    ) -> CommandResult:
        return cls(
            entity_id=entity_id,
            domain=domain,
            action=action,
            success=False,
            status_code=status_code,
            failure=failure,
            message=message,
        )
