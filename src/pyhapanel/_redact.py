"""Redaction helpers for request traces.

Every request carries a long-lived bearer token, so request traces are passed
through :func:`redact_for_log` before they reach a log handler.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "authorization",
        "token",
        "access_token",
        "refresh_token",
        "password",
        "api_password",
        "client_secret",
        "cookie",
        "x-ha-access",
    }
)
_BEARER = re.compile(r"(?i)\bbearer\s+\S+")
_MAX_DEPTH = 10


def _redact_text(text: str, max_string: int) -> str:
    text = _BEARER.sub("Bearer <redacted>", text)
    if len(text) > max_string:
        return f"{text[:max_string]}…<truncated>"
    return text


def redact_for_log(value: Any, *, max_string: int = 256, _depth: int = 0) -> Any:
    """Return a copy of *value* with secrets masked and long strings cut."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _redact_text(value, max_string)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"<bytes:{len(value)}b>"
    if isinstance(value, Mapping):
        return {
            str(key): (
                "<redacted>"
                if str(key).lower() in _SENSITIVE_KEYS
                else redact_for_log(item, max_string=max_string, _depth=_depth + 1)
            )
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    return repr(value)


def trace_request(method: str, url: str, headers: Mapping[str, str], body: bytes | None) -> dict[str, Any]:
    """Build a redacted trace record for one outgoing request.

    JSON bodies are decoded so their keys are redacted too; anything else is
    logged as text.
    """
    decoded: Any = None
    if body:
        try:
            decoded = json.loads(body)
        except ValueError:
            decoded = body.decode("utf-8", errors="replace")
    return redact_for_log({"method": method, "url": url, "headers": dict(headers), "body": decoded})
