"""Configuration read session: request, collect, and stop on completion or deadline."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

from meshcfg.core.errors import TransportReadError
from meshcfg.core.framing import WAKE_SEQUENCE, DebugLineAssembler, FrameExtractor, encode_frame
from meshcfg.core.merger import ConfigMerger
from meshcfg.core.model import WANT_CONFIG_ID, Frame, Message, SessionResult
from meshcfg.transports.base import ByteTransport

QUEUE_SIZE = 100
LOGGER = logging.getLogger(__name__)
DEVICE_LOGGER = logging.getLogger("meshcfg.device")


class MessageCodec(Protocol):
    def decode(self, payload: bytes) -> Message: ...

    def encode_want_config(self, request_id: int) -> bytes: ...


def _offer(queue: asyncio.Queue[str], line: str) -> bool:
    try:
        queue.put_nowait(line)
    except asyncio.QueueFull:
        return False
    return True


class ConfigSession:
    """Drives one configuration read over a byte transport.

    A reader task feeds the frame extractor and publishes frames and debug
    lines on two bounded queues. The session loop consumes one item per
    wake-up and owns the merger, so the snapshot is never shared across tasks.
    Transport errors abort the session; running out of time does not.
    """

    def __init__(
        self,
        transport: ByteTransport,
        codec: MessageCodec,
        *,
        request_id: int = WANT_CONFIG_ID,
        timeout_s: float = 15.0,
        settle_s: float = 0.1,
        read_size: int = 256,
        queue_size: int = QUEUE_SIZE,
        on_debug_line: Callable[[str], None] | None = None,
    ) -> None:
        self.transport = transport
        self.codec = codec
        self.request_id = request_id
        self.timeout_s = timeout_s
        self.settle_s = settle_s
        self.read_size = read_size
        self.queue_size = queue_size
        self.on_debug_line = on_debug_line or DEVICE_LOGGER.debug

    def run(self) -> SessionResult:
        return asyncio.run(self.run_async())

    async def run_async(self) -> SessionResult:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout_s
        frames: asyncio.Queue[Frame] = asyncio.Queue(maxsize=self.queue_size)
        lines: asyncio.Queue[str] = asyncio.Queue(maxsize=self.queue_size)
        stop = asyncio.Event()
        assembler = DebugLineAssembler(lambda line: _offer(lines, line))
        merger = ConfigMerger(request_id=self.request_id)
        frame_count = 0
        completed = False

        await loop.run_in_executor(None, self.transport.write, WAKE_SEQUENCE)
        reader = asyncio.create_task(self._read_loop(assembler, frames, stop))
        frame_get = asyncio.create_task(frames.get())
        line_get = asyncio.create_task(lines.get())
        try:
            await asyncio.sleep(self.settle_s)
            if reader.done():
                reader.result()

            request = encode_frame(self.codec.encode_want_config(self.request_id))
            await loop.run_in_executor(None, self.transport.write, request)
            LOGGER.info("Requested configuration (request id %d)", self.request_id)

            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                done, _ = await asyncio.wait(
                    {reader, frame_get, line_get},
                    timeout=remaining,
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if not done:
                    break

                if reader in done:
                    reader.result()
                    raise TransportReadError("Serial reader stopped unexpectedly")

                if frame_get in done:
                    frame = frame_get.result()
                    frame_get = asyncio.create_task(frames.get())
                    frame_count += 1
                    merger.apply_frame(frame, self.codec.decode)
                    if merger.config.config_complete and merger.config.is_ready():
                        completed = True
                        break
                else:
                    line = line_get.result()
                    line_get = asyncio.create_task(lines.get())
                    self.on_debug_line(line)
        finally:
            stop.set()
            for task in (reader, frame_get, line_get):
                task.cancel()
            await asyncio.gather(reader, frame_get, line_get, return_exceptions=True)

        if completed:
            LOGGER.info("Configuration complete after %d frames", frame_count)
        elif merger.config.config_complete:
            LOGGER.warning("Timed out: completion received but node identity is incomplete")
        else:
            LOGGER.warning("Timed out waiting for device configuration after %.1fs", self.timeout_s)

        return SessionResult(
            config=merger.config,
            completed=completed,
            frames=frame_count,
            decode_errors=merger.decode_errors,
            debug_lines_dropped=assembler.dropped,
        )

    async def _read_loop(
        self,
        assembler: DebugLineAssembler,
        frames: asyncio.Queue[Frame],
        stop: asyncio.Event,
    ) -> None:
        loop = asyncio.get_running_loop()
        extractor = FrameExtractor(assembler.feed)
        while not stop.is_set():
            chunk = await loop.run_in_executor(None, self.transport.read, self.read_size)
            for byte in chunk:
                frame = extractor.feed(byte)
                if frame is not None:
                    await frames.put(frame)
