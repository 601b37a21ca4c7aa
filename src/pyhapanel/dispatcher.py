"""Outbound command dispatcher.

Each operation builds one service call from the target values, performs it
with the configured request timeout and reports a :class:`CommandResult`.
Failures are logged and reported, never raised and never retried; the
dispatcher does not touch device state.
"""

from __future__ import annotations

import logging
from typing import Any

from pyhapanel._api.services import call_service
from pyhapanel._transport import Transport
from pyhapanel.config import PanelConfig
from pyhapanel.exceptions import PanelRemoteRejectedError, PanelTransportError
from pyhapanel.models.command import CommandFailure, CommandResult, DeviceCommand
from pyhapanel.models.device import DeviceKind
from pyhapanel.models.requests import CoverPositionRequest, LightTurnOnRequest, ServiceRequest

_logger = logging.getLogger(__name__)

LIGHT_DOMAIN = "light"
COVER_DOMAIN = "cover"


class CommandDispatcher:
    """Sends state-change requests for every device kind."""

    def __init__(self, config: PanelConfig, transport: Transport) -> None:
        self._config = config
        self._transport = transport

    async def _send(self, entity_id: str, domain: str, action: str, body: dict[str, Any]) -> CommandResult:
        try:
            await call_service(self._config, self._transport, domain, action, body)
        except PanelRemoteRejectedError as exc:
            _logger.warning("%s -> %s/%s rejected: HTTP %s", entity_id, domain, action, exc.status_code)
            return CommandResult.failed(
                entity_id,
                domain,
                action,
                failure=CommandFailure.REJECTED,
                status_code=exc.status_code,
                message=str(exc),
            )
        except PanelTransportError as exc:
            _logger.warning("%s -> %s/%s failed: %s", entity_id, domain, action, exc)
            return CommandResult.failed(
                entity_id,
                domain,
                action,
                failure=CommandFailure.TRANSPORT,
                message=str(exc),
            )
        _logger.info("%s -> %s/%s OK %s", entity_id, domain, action, body)
        return CommandResult.ok(entity_id, domain, action)

    async def set_switch(self, entity_id: str, on: bool) -> CommandResult:
        """Turn an on/off entity on or off."""
        request = ServiceRequest(entity_id=entity_id)
        action = "turn_on" if on else "turn_off"
        return await self._send(request.entity_id, request.domain, action, request.to_body())

    async def set_dimmable(
        self,
        entity_id: str,
        on: bool,
        brightness: int | None = None,
        color_temp_kelvin: int | None = None,
    ) -> CommandResult:
        """Turn a dimmable light off, or on with optional brightness/color temperature.

        When *on* is false the other values are ignored.  When true, only
        brightness ``>= 0`` and color temperature ``> 0`` are sent; omitted
        values are left unchanged by the remote store.
        """
        if not on:
            return await self.set_switch(entity_id, False)
        request = LightTurnOnRequest(
            entity_id=entity_id,
            brightness=brightness,
            color_temp_kelvin=color_temp_kelvin,
        )
        return await self._send(request.entity_id, LIGHT_DOMAIN, "turn_on", request.to_body())

    async def set_cover_position(self, entity_id: str, position: int) -> CommandResult:
        """Move a cover to *position* (0 = closed, 100 = open).

        Raises :class:`ValueError` if *position* is outside 0-100.
        """
        request = CoverPositionRequest(entity_id=entity_id, position=position)
        return await self._send(request.entity_id, COVER_DOMAIN, "set_cover_position", request.to_body())

    async def open_cover(self, entity_id: str) -> CommandResult:
        request = ServiceRequest(entity_id=entity_id)
        return await self._send(request.entity_id, COVER_DOMAIN, "open_cover", request.to_body())

    async def close_cover(self, entity_id: str) -> CommandResult:
        request = ServiceRequest(entity_id=entity_id)
        return await self._send(request.entity_id, COVER_DOMAIN, "close_cover", request.to_body())

    async def execute(self, command: DeviceCommand) -> CommandResult:
        """Send the service call matching a gesture's desired device state."""
        entity_id = command.entity_id
        if command.kind == DeviceKind.SIMPLE_LIGHT:
            return await self.set_switch(entity_id, bool(command.on))
        if command.kind == DeviceKind.DIMMABLE_LIGHT:
            return await self.set_dimmable(
                entity_id,
                bool(command.on),
                command.brightness,
                command.color_temp_kelvin,
            )
        if command.kind == DeviceKind.COVER:
            if command.position is None:
                raise ValueError(f"Cover command for {entity_id} has no position")
            return await self.set_cover_position(entity_id, command.position)
        raise ValueError(f"Unsupported device kind: {command.kind}")  # pragma: no cover
