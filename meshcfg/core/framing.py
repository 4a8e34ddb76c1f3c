"""Frame extraction for the shared binary/debug-text serial stream.

Wire format of a frame:

  0x94 0xC3 | LEN_HI LEN_LO | PAYLOAD (LEN bytes, LEN <= 512)

Anything that cannot be part of a frame is handed back as a stray byte so the
device's debug console output can be reassembled into lines.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from meshcfg.core.model import Frame

MAGIC1 = 0x94
MAGIC2 = 0xC3
HEADER_SIZE = 4
MAX_FRAME_SIZE = 512
WAKE_SEQUENCE = bytes([MAGIC2]) * 32
LOGGER = logging.getLogger(__name__)


def encode_frame(payload: bytes) -> bytes:
    if len(payload) > MAX_FRAME_SIZE:
        raise ValueError(f"payload exceeds max frame size {MAX_FRAME_SIZE} bytes")
    return bytes([MAGIC1, MAGIC2, len(payload) >> 8, len(payload) & 0xFF]) + payload


class FrameExtractor:
    """Byte-at-a-time state machine keyed by the length of the candidate buffer.

    A magic pair seen inside debug text is a false start. When the second magic
    byte or the declared length rules the candidate out, every buffered byte is
    replayed to `on_stray` so no input byte is ever lost.
    """

    def __init__(self, on_stray: Callable[[int], None]) -> None:
        self._on_stray = on_stray
        self._buf = bytearray()
        self._target = 0

    def reset(self) -> None:
        self._buf.clear()
        self._target = 0

    def _replay(self) -> None:
        pending = bytes(self._buf)
        self.reset()
        for byte in pending:
            self._on_stray(byte)

    def feed(self, byte: int) -> Frame | None:
        ptr = len(self._buf)

        if ptr == 0:
            if byte == MAGIC1:
                self._buf.append(byte)
            else:
                self._on_stray(byte)
            return None

        if ptr == 1:
            if byte == MAGIC2:
                self._buf.append(byte)
            else:
                self._buf.append(byte)
                self._replay()
            return None

        self._buf.append(byte)

        if ptr == 2:
            return None

        if ptr == 3:
            declared = (self._buf[2] << 8) | self._buf[3]
            if declared > MAX_FRAME_SIZE:
                LOGGER.debug("Rejecting frame header with length %d", declared)
                self._replay()
                return None
            self._target = HEADER_SIZE + declared
            if declared > 0:
                return None

        if len(self._buf) >= self._target:
            frame = Frame(payload=bytes(self._buf[HEADER_SIZE:self._target]))
            self.reset()
            return frame
        return None

    def feed_bytes(self, data: Iterable[int]) -> list[Frame]:
        frames: list[Frame] = []
        for byte in data:
            frame = self.feed(byte)
            if frame is not None:
                frames.append(frame)
        return frames


class DebugLineAssembler:
    """Collects printable ASCII into lines; LF flushes, CR and other bytes are dropped.

    `sink` must not block. It returns False when it had to discard the line.
    """

    def __init__(self, sink: Callable[[str], bool]) -> None:
        self._sink = sink
        self._line: list[str] = []
        self.dropped = 0

    def feed(self, byte: int) -> None:
        if byte == 0x0D:
            return
        if byte == 0x0A:
            if self._line:
                line = "".join(self._line)
                self._line.clear()
                if not self._sink(line):
                    self.dropped += 1
                    LOGGER.debug("Dropped device debug line: %s", line)
            return
        if 32 <= byte <= 126:
            self._line.append(chr(byte))
