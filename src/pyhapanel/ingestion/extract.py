"""Best-effort field extraction from state responses.

State responses follow a small, known schema from a trusted peer, so the
fields we need are located by scanning for ``"<key>":`` instead of decoding
the whole document.  That keeps working on bodies that were cut off by the
response buffer: fields that fit are extracted, fields that did not are
reported as missing.

Only the first occurrence of a key is considered.
"""

from __future__ import annotations

import re

from pyhapanel.ingestion.buffer import ResponseBuffer

BufferLike = ResponseBuffer | bytes | bytearray | memoryview

_INT_PATTERN = re.compile(rb"[+-]?[0-9]+")
_NULL = b"null"
_QUOTE = 0x22
_SPACE = 0x20


def _payload(buffer: BufferLike) -> bytes:
    if isinstance(buffer, ResponseBuffer):
        return buffer.payload()
    return bytes(buffer)


def _value_offset(data: bytes, key: str) -> int | None:
    """Offset of the first non-space byte after ``"<key>":``, or ``None``."""
    pattern = b'"' + key.encode("ascii") + b'":'
    index = data.find(pattern)
    if index < 0:
        return None
    pos = index + len(pattern)
    while pos < len(data) and data[pos] == _SPACE:
        pos += 1
    return pos


def extract_field(buffer: BufferLike, key: str) -> int | None:
    """Extract an integer field.

    Returns ``None`` when the key is absent, its value is ``null``, no
    digits follow, or the digit run reaches the end of the data (the number
    may have been cut short by truncation).
    """
    data = _payload(buffer)
    pos = _value_offset(data, key)
    if pos is None:
        return None
    if data.startswith(_NULL, pos):
        return None
    match = _INT_PATTERN.match(data, pos)
    if match is None:
        return None
    if match.end() >= len(data):
        return None
    return int(match.group())


def extract_state(buffer: BufferLike) -> str | None:
    """Extract the quoted ``"state"`` value, or ``None`` if absent/unterminated."""
    data = _payload(buffer)
    pos = _value_offset(data, "state")
    if pos is None or pos >= len(data) or data[pos] != _QUOTE:
        return None
    end = data.find(b'"', pos + 1)
    if end < 0:
        return None
    return data[pos + 1 : end].decode("utf-8", errors="replace")


def extract_state_on(buffer: BufferLike) -> bool | None:
    """Return whether ``"state"`` equals exactly ``"on"``; ``None`` if missing."""
    state = extract_state(buffer)
    if state is None:
        return None
    return state == "on"
