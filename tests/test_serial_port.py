from __future__ import annotations

import pytest
import serial

from meshcfg.core.errors import TransportConnectError, TransportReadError, TransportSendError
from meshcfg.transports import serial_port
from meshcfg.transports.serial_port import SerialTransport


class FakeSerial:
    def __init__(self, port: str, baud: int, timeout: float) -> None:
        self.port = port
        self.baud = baud
        self.timeout = timeout
        self.buffer = bytearray(b"\x94\xc3\x00\x02ok")
        self.written = bytearray()
        self.broken = False

    @property
    def in_waiting(self) -> int:
        return len(self.buffer)

    def read(self, size: int = 1) -> bytes:
        if self.broken:
            raise serial.SerialException("device reports readiness to read but returned no data")
        data = bytes(self.buffer[:size])
        del self.buffer[:size]
        return data

    def write(self, data: bytes) -> int:
        if self.broken:
            raise serial.SerialException("write failed")
        self.written.extend(data)
        return len(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


def test_open_failure_raises_clean_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail(*args, **kwargs):
        raise serial.SerialException("could not open port /dev/nope")

    monkeypatch.setattr(serial_port.serial, "Serial", _fail)
    with pytest.raises(TransportConnectError):
        SerialTransport("/dev/nope")


def test_read_returns_available_bytes(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(serial_port.serial, "Serial", FakeSerial)
    transport = SerialTransport("/dev/ttyUSB0", baud=115200, read_timeout_s=0.1)

    assert transport.read(4) == b"\x94\xc3\x00\x02"
    assert transport.read(64) == b"ok"
    assert transport.read(64) == b""


def test_read_and_write_errors_wrapped(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(serial_port.serial, "Serial", FakeSerial)
    transport = SerialTransport("/dev/ttyUSB0")
    transport._serial.broken = True

    with pytest.raises(TransportReadError):
        transport.read(1)
    with pytest.raises(TransportSendError):
        transport.write(b"\xc3" * 32)


def test_write_passes_bytes_through(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(serial_port.serial, "Serial", FakeSerial)
    with SerialTransport("/dev/ttyUSB0") as transport:
        transport.write(b"\x94\xc3\x00\x02\x18\x40")
        assert bytes(transport._serial.written) == b"\x94\xc3\x00\x02\x18\x40"
