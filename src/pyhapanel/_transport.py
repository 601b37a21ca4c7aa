"""HTTP transport with bearer-token injection and bounded body reads."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import aiohttp

from pyhapanel._constants import USER_AGENT
from pyhapanel._redact import trace_request
from pyhapanel.config import PanelConfig
from pyhapanel.exceptions import PanelTransportError
from pyhapanel.ingestion.buffer import ResponseBuffer

_logger = logging.getLogger(__name__)

_CHUNK_SIZE = 256


@dataclass(frozen=True)
class TransportRequest:
    """A single request relative to the configured API root."""

    method: str
    path: str
    body: bytes | None = None


class Transport(Protocol):
    """Structural transport interface used by the dispatcher and scheduler.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def perform(
        self,
        request: TransportRequest,
        *,
        timeout: float,
        sink: ResponseBuffer | None = None,
    ) -> int:
        """Execute *request* and return the HTTP status.

        The body is streamed into *sink* (truncated to its capacity) when
        given, and discarded otherwise.  Raises :class:`PanelTransportError`
        when the request does not complete within *timeout*.
        """
        ...


class HttpTransport:
    """aiohttp-backed transport for the remote state store."""

    def __init__(self, config: PanelConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    def _headers(self, request: TransportRequest) -> dict[str, str]:
        headers: dict[str, str] = {
            "authorization": f"Bearer {self._config.token}",
            "user-agent": USER_AGENT,
        }
        if request.body is not None:
            headers["content-type"] = "application/json"
        return headers

    async def perform(
        self,
        request: TransportRequest,
        *,
        timeout: float,
        sink: ResponseBuffer | None = None,
    ) -> int:
        url = f"{self._config.base_url}{request.path}"
        headers = self._headers(request)

        _logger.debug("%s %s", request.method, url)
        if self._config.api_trace_enabled:
            _logger.debug("Request trace %s", trace_request(request.method, url, headers, request.body))

        try:
            async with self._http.request(
                request.method,
                url,
                data=request.body,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as resp:
                if sink is not None:
                    async for chunk in resp.content.iter_chunked(_CHUNK_SIZE):
                        sink.write(chunk)
                status = resp.status
        except aiohttp.ClientError as exc:
            raise PanelTransportError(
                f"Request to {request.path} failed: {exc}",
                endpoint=request.path,
            ) from exc
        except TimeoutError as exc:
            raise PanelTransportError(
                f"Request to {request.path} timed out after {timeout}s",
                endpoint=request.path,
            ) from exc

        if sink is not None and sink.truncated:
            _logger.debug("Response from %s truncated to %d bytes", request.path, sink.length)
        return status
