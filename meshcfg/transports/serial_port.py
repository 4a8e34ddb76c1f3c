"""Serial transport implementation using pyserial."""

from __future__ import annotations

import serial
from serial.tools import list_ports

from meshcfg.core.errors import (
    TransportConnectError,
    TransportReadError,
    TransportSendError,
)


class SerialTransport:
    def __init__(
        self,
        port: str,
        *,
        baud: int = 115200,
        read_timeout_s: float = 0.1,
    ) -> None:
        try:
            self._serial = serial.Serial(port, baud, timeout=read_timeout_s)
        except (serial.SerialException, ValueError) as exc:
            raise TransportConnectError(f"Failed to open serial port {port}: {exc}") from exc
        self.port = port

    def read(self, size: int = 1) -> bytes:
        try:
            data = self._serial.read(1)
            if data and size > 1:
                waiting = min(self._serial.in_waiting, size - 1)
                if waiting:
                    data += self._serial.read(waiting)
            return data
        except serial.SerialException as exc:
            raise TransportReadError(f"Serial read failed on {self.port}: {exc}") from exc

    def write(self, data: bytes) -> None:
        try:
            written = self._serial.write(data)
            self._serial.flush()
        except serial.SerialException as exc:
            raise TransportSendError(f"Serial write failed on {self.port}: {exc}") from exc
        if written is not None and written != len(data):
            raise TransportSendError(
                f"Short serial write on {self.port}: {written} of {len(data)} bytes"
            )

    def close(self) -> None:
        self._serial.close()

    def __enter__(self) -> SerialTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def list_serial_ports() -> list[tuple[str, str]]:
    return sorted((info.device, info.description) for info in list_ports.comports())
