"""Rendering of an assembled DeviceConfig for display and upload."""

from __future__ import annotations

import base64
from typing import Any

from google.protobuf.json_format import MessageToDict
from google.protobuf.message import Message as ProtobufMessage

from meshcfg.core.model import DeviceConfig


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, ProtobufMessage):
        return MessageToDict(value, preserving_proto_field_name=True)
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    return value


def config_to_dict(config: DeviceConfig) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "node_num": config.node_number or 0,
        "hardware_id": config.hardware_id,
        "long_name": config.long_name,
        "short_name": config.short_name,
        "config_complete": config.config_complete,
    }
    if config.device_id:
        doc["device_id"] = _to_jsonable(config.device_id)
    if config.metadata is not None:
        doc["metadata"] = _to_jsonable(config.metadata)
    if config.config:
        doc["config"] = {name: _to_jsonable(v) for name, v in config.config.items()}
    if config.module_config:
        doc["module_config"] = {name: _to_jsonable(v) for name, v in config.module_config.items()}
    if config.channels:
        doc["channels"] = [_to_jsonable(c) for c in config.channels]
    return doc


def summary_lines(config: DeviceConfig) -> list[str]:
    node = config.node_number or 0
    lines = [
        f"Node Number: {node} (0x{node:08x})",
        f"Hardware ID: {config.hardware_id}",
        f"Long Name: {config.long_name}",
        f"Short Name: {config.short_name}",
    ]
    if config.metadata is not None:
        metadata = _to_jsonable(config.metadata)
        if isinstance(metadata, dict):
            # defaults are omitted by MessageToDict; enums render by name
            lines.append(f"Firmware: {metadata.get('firmware_version', '')}")
            lines.append(f"Hardware Model: {metadata.get('hw_model', 'UNSET')}")
    lines.append(f"Config Sections: {', '.join(sorted(config.config)) or '-'}")
    lines.append(f"Module Sections: {', '.join(sorted(config.module_config)) or '-'}")
    lines.append(f"Channels: {len(config.channels)}")
    lines.append(f"Config Complete: {config.config_complete}")
    return lines
