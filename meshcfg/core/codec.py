"""Protobuf codec translating radio messages into the merge layer's message kinds."""

from __future__ import annotations

from google.protobuf.message import DecodeError as ProtobufDecodeError
from meshtastic.protobuf import mesh_pb2

from meshcfg.core.errors import DecodeError
from meshcfg.core.model import (
    Channel,
    CompletionSignal,
    ConfigFragment,
    Message,
    Metadata,
    ModuleConfigFragment,
    NodeIdentity,
    NodeRecord,
    Unhandled,
)

_PAYLOAD_VARIANT = "payload_variant"


class ProtobufCodec:
    """Decodes `FromRadio` payloads and encodes `ToRadio` configuration requests."""

    def encode_want_config(self, request_id: int) -> bytes:
        to_radio = mesh_pb2.ToRadio()
        to_radio.want_config_id = request_id
        return to_radio.SerializeToString()

    def decode(self, payload: bytes) -> Message:
        from_radio = mesh_pb2.FromRadio()
        try:
            from_radio.ParseFromString(payload)
        except ProtobufDecodeError as exc:
            raise DecodeError(f"Invalid FromRadio payload ({len(payload)} bytes): {exc}") from exc

        variant = from_radio.WhichOneof(_PAYLOAD_VARIANT)
        if variant is None:
            raise DecodeError("FromRadio payload carries no known variant")

        if variant == "my_info":
            return NodeIdentity(
                node_number=from_radio.my_info.my_node_num,
                device_id=bytes(from_radio.my_info.device_id),
            )
        if variant == "node_info":
            if not from_radio.node_info.HasField("user"):
                return Unhandled(variant="node_info")
            user = from_radio.node_info.user
            return NodeRecord(
                node_number=from_radio.node_info.num,
                hardware_id=user.id,
                long_name=user.long_name,
                short_name=user.short_name,
                macaddr=bytes(user.macaddr),
            )
        if variant == "metadata":
            return Metadata(value=from_radio.metadata)
        if variant == "config":
            section = from_radio.config.WhichOneof(_PAYLOAD_VARIANT)
            if section is None:
                return Unhandled(variant="config")
            return ConfigFragment(section=section, value=getattr(from_radio.config, section))
        if variant == "moduleConfig":
            section = from_radio.moduleConfig.WhichOneof(_PAYLOAD_VARIANT)
            if section is None:
                return Unhandled(variant="moduleConfig")
            return ModuleConfigFragment(
                section=section,
                value=getattr(from_radio.moduleConfig, section),
            )
        if variant == "channel":
            return Channel(value=from_radio.channel)
        if variant == "config_complete_id":
            return CompletionSignal(request_id=from_radio.config_complete_id)
        return Unhandled(variant=variant)
