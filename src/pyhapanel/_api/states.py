"""State query endpoint.

Endpoint:
  - GET /states/<entity_id>

The body is streamed into the caller's :class:`ResponseBuffer`, which is
reset first.  Bodies larger than the buffer are truncated, not rejected.
"""

from __future__ import annotations

from pyhapanel._constants import HTTP_OK
from pyhapanel._transport import Transport, TransportRequest
from pyhapanel.config import PanelConfig
from pyhapanel.exceptions import PanelRemoteRejectedError
from pyhapanel.ingestion.buffer import ResponseBuffer


def state_path(entity_id: str) -> str:
    return f"/states/{entity_id}"


async def fetch_state(
    config: PanelConfig,
    transport: Transport,
    entity_id: str,
    buffer: ResponseBuffer,
) -> None:
    """Fetch the state of *entity_id* into *buffer*.

    Raises
    ------
    PanelTransportError
        The request did not complete.
    PanelRemoteRejectedError
        The remote store answered with a status other than 200.
    """
    path = state_path(entity_id)
    buffer.reset()
    status = await transport.perform(
        TransportRequest(method="GET", path=path),
        timeout=config.request_timeout,
        sink=buffer,
    )
    if status != HTTP_OK:
        raise PanelRemoteRejectedError(
            f"HTTP {status} from {path}",
            status_code=status,
            endpoint=path,
        )
