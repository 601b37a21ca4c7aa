"""Fixed-capacity response buffer shared by consecutive polls."""

from __future__ import annotations

from pyhapanel._constants import RESPONSE_BUFFER_SIZE


class ResponseBuffer:
    """Reusable byte region with a length cursor.

    At most ``capacity - 1`` payload bytes are kept and a zero byte is
    always present right after the payload.  Bytes that do not fit are
    dropped and :attr:`truncated` is set; truncation is an expected
    condition, not an error.

    A single buffer must only ever be written by one request at a time.
    """

    __slots__ = ("_data", "_length", "_truncated")

    def __init__(self, capacity: int = RESPONSE_BUFFER_SIZE) -> None:
        if capacity < 2:
            raise ValueError(f"capacity must be at least 2, got {capacity}")
        self._data = bytearray(capacity)
        self._length = 0
        self._truncated = False

    @property
    def capacity(self) -> int:
        return len(self._data)

    @property
    def length(self) -> int:
        return self._length

    @property
    def truncated(self) -> bool:
        """Whether bytes were dropped since the last :meth:`reset`."""
        return self._truncated

    @property
    def full(self) -> bool:
        return self._length >= len(self._data) - 1

    def reset(self) -> None:
        self._length = 0
        self._truncated = False
        self._data[0] = 0

    def write(self, chunk: bytes | bytearray | memoryview) -> int:
        """Append *chunk*, copying only what fits.  Returns the bytes copied."""
        room = len(self._data) - 1 - self._length
        size = len(chunk)
        copy = min(room, size)
        if copy < size:
            self._truncated = True
        if copy > 0:
            self._data[self._length : self._length + copy] = chunk[:copy]
            self._length += copy
        self._data[self._length] = 0
        return copy

    def payload(self) -> bytes:
        """Return exactly the bytes written since the last reset."""
        return bytes(memoryview(self._data)[: self._length])

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        return f"ResponseBuffer(capacity={self.capacity}, length={self._length}, truncated={self._truncated})"
