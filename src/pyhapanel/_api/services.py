"""Service call endpoint.

Endpoint:
  - POST /services/<domain>/<action>

The body is a compact JSON object with ``entity_id`` plus optional
service data.  Success is HTTP 200; the response body is not needed.
"""

from __future__ import annotations

import json
from typing import Any

from pyhapanel._constants import HTTP_OK
from pyhapanel._transport import Transport, TransportRequest
from pyhapanel.config import PanelConfig
from pyhapanel.exceptions import PanelRemoteRejectedError


def service_path(domain: str, action: str) -> str:
    return f"/services/{domain}/{action}"


def encode_body(body: dict[str, Any]) -> bytes:
    return json.dumps(body, separators=(",", ":")).encode("utf-8")


async def call_service(
    config: PanelConfig,
    transport: Transport,
    domain: str,
    action: str,
    body: dict[str, Any],
) -> None:
    """POST a service call.

    Raises
    ------
    PanelTransportError
        The request did not complete.
    PanelRemoteRejectedError
        The remote store answered with a status other than 200.
    """
    path = service_path(domain, action)
    request = TransportRequest(method="POST", path=path, body=encode_body(body))
    status = await transport.perform(request, timeout=config.request_timeout)
    if status != HTTP_OK:
        raise PanelRemoteRejectedError(
            f"HTTP {status} from {path}",
            status_code=status,
            endpoint=path,
        )
