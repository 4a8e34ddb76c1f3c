"""Transport interfaces."""

from __future__ import annotations

from typing import Protocol


class ByteTransport(Protocol):
    def read(self, size: int = 1) -> bytes:
        """Return between one and `size` bytes, or b"" when the read timed out."""

    def write(self, data: bytes) -> None:
        """Write all of `data` or raise a TransportError."""
