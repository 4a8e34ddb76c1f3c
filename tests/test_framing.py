from __future__ import annotations

import asyncio
import random

import pytest

from meshcfg.core.codec import ProtobufCodec
from meshcfg.core.framing import (
    MAGIC1,
    MAGIC2,
    MAX_FRAME_SIZE,
    DebugLineAssembler,
    FrameExtractor,
    encode_frame,
)
from meshcfg.core.model import WANT_CONFIG_ID
from meshcfg.core.session import _offer


def _extract(data: bytes) -> tuple[list[bytes], bytes]:
    stray = bytearray()
    extractor = FrameExtractor(stray.append)
    frames = [f.payload for f in extractor.feed_bytes(data)]
    return frames, bytes(stray)


def test_false_positive_magic_replayed_as_stray() -> None:
    frames, stray = _extract(bytes([MAGIC1, 0x41]))
    assert frames == []
    assert stray == bytes([MAGIC1, 0x41])


def test_want_config_request_round_trip() -> None:
    payload = ProtobufCodec().encode_want_config(WANT_CONFIG_ID)
    frames, stray = _extract(encode_frame(payload))
    assert frames == [payload]
    assert stray == b""


def test_oversized_header_replayed_and_body_treated_as_text() -> None:
    header = bytes([MAGIC1, MAGIC2, 600 >> 8, 600 & 0xFF])
    body = b"x" * 600
    frames, stray = _extract(header + body)
    assert frames == []
    assert stray == header + body


def test_max_size_frame_accepted() -> None:
    payload = bytes(range(256)) * 2
    assert len(payload) == MAX_FRAME_SIZE
    frames, stray = _extract(encode_frame(payload))
    assert frames == [payload]
    assert stray == b""


def test_empty_frame_does_not_consume_next_byte() -> None:
    frames, stray = _extract(encode_frame(b"") + b"A")
    assert frames == [b""]
    assert stray == b"A"


def test_frames_interleaved_with_debug_text() -> None:
    data = b"INFO boot ok\r\n" + encode_frame(b"\x01\x02") + b"DEBUG \x94 stray\n" + encode_frame(b"\x03")
    frames, stray = _extract(data)
    assert frames == [b"\x01\x02", b"\x03"]
    assert stray == b"INFO boot ok\r\nDEBUG \x94 stray\n"


def test_byte_conservation_on_random_input() -> None:
    rng = random.Random(1234)
    chunks = []
    for _ in range(200):
        kind = rng.random()
        if kind < 0.3:
            chunks.append(encode_frame(bytes(rng.randrange(256) for _ in range(rng.randrange(20)))))
        elif kind < 0.4:
            chunks.append(bytes([MAGIC1, MAGIC2, 0x7F, 0xFF]))
        else:
            chunks.append(bytes(rng.randrange(256) for _ in range(rng.randrange(1, 10))))
    # the newline tail flushes any frame still in progress
    data = b"".join(chunks) + b"\n" * (4 + MAX_FRAME_SIZE)

    frames, stray = _extract(data)
    framed = sum(4 + len(payload) for payload in frames)
    assert framed + len(stray) == len(data)


def test_encode_frame_rejects_oversized_payload() -> None:
    with pytest.raises(ValueError):
        encode_frame(b"\x00" * (MAX_FRAME_SIZE + 1))


def test_debug_lines_assembled_from_printable_bytes() -> None:
    lines: list[str] = []
    assembler = DebugLineAssembler(lambda line: lines.append(line) is None)
    for byte in b"hello\r\n\n\x01wor\x7fld\n":
        assembler.feed(byte)
    assert lines == ["hello", "world"]
    assert assembler.dropped == 0


def test_debug_lines_dropped_when_queue_full() -> None:
    queue: asyncio.Queue[str] = asyncio.Queue(maxsize=1)
    assembler = DebugLineAssembler(lambda line: _offer(queue, line))
    extractor = FrameExtractor(assembler.feed)

    frames = extractor.feed_bytes(b"first\nsecond\n" + encode_frame(b"\x08\x01") + b"third\n")

    assert [f.payload for f in frames] == [b"\x08\x01"]
    assert queue.qsize() == 1
    assert queue.get_nowait() == "first"
    assert assembler.dropped == 2
