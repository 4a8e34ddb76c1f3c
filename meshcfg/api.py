"""Stable public API for building tooling on top of meshcfg.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from meshcfg.core.errors import (
    DecodeError,
    MeshcfgError,
    SettingsError,
    TransportConnectError,
    TransportError,
    TransportReadError,
    TransportSendError,
    UploadError,
)
from meshcfg.core.model import WANT_CONFIG_ID, DeviceConfig, SessionResult
from meshcfg.core.report import config_to_dict
from meshcfg.core.service import MeshService, TransportFactory
from meshcfg.core.session import MessageCodec
from meshcfg.core.settings import Settings
from meshcfg.transports.base import ByteTransport

__all__ = [
    "MeshcfgError",
    "DecodeError",
    "SettingsError",
    "TransportError",
    "TransportConnectError",
    "TransportReadError",
    "TransportSendError",
    "UploadError",
    "ByteTransport",
    "DeviceConfig",
    "MessageCodec",
    "SessionResult",
    "Settings",
    "WANT_CONFIG_ID",
    "Client",
]


class Client:
    """Public client for reading a radio's configuration.

    A `Client` instance wraps settings loading, the serial transport, and the
    configuration session behind a stable API intended for third-party tools
    (GUI/TUI/services/scripts).
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        transport_factory: TransportFactory | None = None,
        codec: MessageCodec | None = None,
    ) -> None:
        self._service = MeshService(
            settings=settings,
            transport_factory=transport_factory,
            codec=codec,
        )

    @property
    def settings(self) -> Settings:
        return self._service.settings

    def list_ports(self) -> list[tuple[str, str]]:
        return self._service.list_ports()

    def read_config(
        self,
        *,
        on_debug_line: Callable[[str], None] | None = None,
    ) -> SessionResult:
        return self._service.read_config(on_debug_line=on_debug_line)

    def read_config_dict(self) -> dict[str, Any]:
        return config_to_dict(self.read_config().config)

    def upload(self, result: SessionResult) -> bool:
        return self._service.upload(result)
