"""Core data models shared by the framing, merge, and session layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

WANT_CONFIG_ID = 64
MAX_CHANNELS = 8


@dataclass(frozen=True)
class Frame:
    payload: bytes

    @property
    def length(self) -> int:
        return len(self.payload)


@dataclass(frozen=True)
class NodeIdentity:
    node_number: int
    device_id: bytes = b""


@dataclass(frozen=True)
class NodeRecord:
    node_number: int
    hardware_id: str = ""
    long_name: str = ""
    short_name: str = ""
    macaddr: bytes = b""


@dataclass(frozen=True)
class Metadata:
    value: Any


@dataclass(frozen=True)
class ConfigFragment:
    section: str
    value: Any


@dataclass(frozen=True)
class ModuleConfigFragment:
    section: str
    value: Any


@dataclass(frozen=True)
class Channel:
    value: Any


@dataclass(frozen=True)
class CompletionSignal:
    request_id: int


@dataclass(frozen=True)
class Unhandled:
    """A decodable message kind that carries nothing the merger uses."""

    variant: str


Message = Union[
    NodeIdentity,
    NodeRecord,
    Metadata,
    ConfigFragment,
    ModuleConfigFragment,
    Channel,
    CompletionSignal,
    Unhandled,
]


@dataclass
class DeviceConfig:
    node_number: int | None = None
    device_id: bytes | None = None
    hardware_id: str = ""
    long_name: str = ""
    short_name: str = ""
    metadata: Any = None
    config: dict[str, Any] = field(default_factory=dict)
    module_config: dict[str, Any] = field(default_factory=dict)
    channels: list[Any] = field(default_factory=list)
    config_complete: bool = False

    def is_ready(self) -> bool:
        """Minimum field set required before a completion signal is final."""
        return self.node_number is not None and self.hardware_id != ""


@dataclass(frozen=True)
class SessionResult:
    config: DeviceConfig
    completed: bool
    frames: int = 0
    decode_errors: int = 0
    debug_lines_dropped: int = 0
