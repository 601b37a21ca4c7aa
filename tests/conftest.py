from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any

import pytest

from pyhapanel._transport import TransportRequest
from pyhapanel.config import PanelConfig
from pyhapanel.exceptions import PanelTransportError
from pyhapanel.ingestion.buffer import ResponseBuffer


@dataclass
class FakeBackend:
    """In-memory stand-in for the remote state store."""

    states: dict[str, bytes] = field(default_factory=dict)
    status_by_path: dict[str, int] = field(default_factory=dict)
    fail_paths: set[str] = field(default_factory=set)
    requests: list[TransportRequest] = field(default_factory=list)
    timeouts: list[float] = field(default_factory=list)
    delays: dict[bytes, float] = field(default_factory=dict)
    chunk_size: int = 7

    async def perform(
        self,
        request: TransportRequest,
        *,
        timeout: float,
        sink: ResponseBuffer | None = None,
    ) -> int:
        self.requests.append(request)
        self.timeouts.append(timeout)
        if request.path in self.fail_paths:
            raise PanelTransportError(f"connection refused: {request.path}", endpoint=request.path)
        for marker, delay in self.delays.items():
            if request.body is not None and marker in request.body:
                await asyncio.sleep(delay)

        if request.method == "GET":
            body = self.states.get(request.path.removeprefix("/states/"))
            if body is None:
                return self.status_by_path.get(request.path, 404)
            if sink is not None:
                for start in range(0, len(body), self.chunk_size):
                    sink.write(body[start : start + self.chunk_size])
        return self.status_by_path.get(request.path, 200)

    def set_state(self, entity_id: str, payload: dict[str, Any]) -> None:
        self.states[entity_id] = json.dumps(payload).encode("utf-8")

    @property
    def paths(self) -> list[str]:
        return [request.path for request in self.requests]

    def posts(self) -> list[tuple[str, dict[str, Any]]]:
        return [
            (request.path, json.loads(request.body or b"{}"))
            for request in self.requests
            if request.method == "POST"
        ]


@pytest.fixture
def config() -> PanelConfig:
    return PanelConfig(
        token="test-token",
        base_url="http://ha.test:8123/api",
        request_timeout=1.0,
        startup_delay=0.0,
        poll_gap=0.0,
        poll_interval=0.0,
        lock_timeout=0.05,
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()
