"""Service layer used by CLI and future UI frontends."""

from __future__ import annotations

from collections.abc import Callable

from meshcfg.core.codec import ProtobufCodec
from meshcfg.core.model import SessionResult
from meshcfg.core.session import ConfigSession, MessageCodec
from meshcfg.core.settings import Settings, load_settings
from meshcfg.core.upload import upload_config
from meshcfg.transports.base import ByteTransport
from meshcfg.transports.serial_port import SerialTransport, list_serial_ports

TransportFactory = Callable[[Settings], ByteTransport]


def _open_serial(settings: Settings) -> SerialTransport:
    return SerialTransport(
        settings.port,
        baud=settings.baud,
        read_timeout_s=settings.read_timeout_s,
    )


class MeshService:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        transport_factory: TransportFactory | None = None,
        codec: MessageCodec | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.transport_factory = transport_factory or _open_serial
        self.codec = codec or ProtobufCodec()

    def list_ports(self) -> list[tuple[str, str]]:
        return list_serial_ports()

    def read_config(
        self,
        *,
        on_debug_line: Callable[[str], None] | None = None,
    ) -> SessionResult:
        transport = self.transport_factory(self.settings)
        try:
            session = ConfigSession(
                transport,
                self.codec,
                timeout_s=self.settings.timeout_s,
                on_debug_line=on_debug_line,
            )
            return session.run()
        finally:
            close = getattr(transport, "close", None)
            if close is not None:
                close()

    def upload(self, result: SessionResult) -> bool:
        return upload_config(
            result.config,
            admin_url=self.settings.admin_url,
            api_key=self.settings.api_key,
            mesh_id=self.settings.mesh_id,
        )
