"""Merges decoded radio messages into one DeviceConfig snapshot."""

from __future__ import annotations

import logging
from collections.abc import Callable

from meshcfg.core.errors import DecodeError
from meshcfg.core.model import (
    MAX_CHANNELS,
    WANT_CONFIG_ID,
    Channel,
    CompletionSignal,
    ConfigFragment,
    DeviceConfig,
    Frame,
    Message,
    Metadata,
    ModuleConfigFragment,
    NodeIdentity,
    NodeRecord,
    Unhandled,
)

LOGGER = logging.getLogger(__name__)


class ConfigMerger:
    """Single owner of the DeviceConfig being assembled.

    `apply` returns True when the message was the completion signal for
    `request_id`. Whether the snapshot is usable is a separate question answered
    by `DeviceConfig.is_ready`.
    """

    def __init__(self, *, request_id: int = WANT_CONFIG_ID) -> None:
        self.request_id = request_id
        self.config = DeviceConfig()
        self.decode_errors = 0

    def apply_frame(self, frame: Frame, decode: Callable[[bytes], Message]) -> bool:
        try:
            message = decode(frame.payload)
        except DecodeError as exc:
            self.decode_errors += 1
            LOGGER.debug("Skipping undecodable frame: %s", exc)
            return False
        return self.apply(message)

    def apply(self, message: Message) -> bool:
        config = self.config

        if isinstance(message, NodeIdentity):
            if config.node_number is None:
                config.node_number = message.node_number
            elif config.node_number != message.node_number:
                LOGGER.warning(
                    "Ignoring node identity %d; session already bound to node %d",
                    message.node_number,
                    config.node_number,
                )
                return False
            if not config.device_id and message.device_id:
                config.device_id = message.device_id
        elif isinstance(message, NodeRecord):
            if config.node_number is None or message.node_number != config.node_number:
                LOGGER.debug("Ignoring node record for foreign node %d", message.node_number)
                return False
            config.hardware_id = message.hardware_id
            config.long_name = message.long_name
            config.short_name = message.short_name
            if not config.device_id and message.macaddr:
                config.device_id = message.macaddr
        elif isinstance(message, Metadata):
            config.metadata = message.value
        elif isinstance(message, ConfigFragment):
            LOGGER.debug("Merged config section '%s'", message.section)
            config.config[message.section] = message.value
        elif isinstance(message, ModuleConfigFragment):
            LOGGER.debug("Merged module config section '%s'", message.section)
            config.module_config[message.section] = message.value
        elif isinstance(message, Channel):
            if len(config.channels) >= MAX_CHANNELS:
                LOGGER.warning("Dropping channel beyond the %d-channel limit", MAX_CHANNELS)
                return False
            config.channels.append(message.value)
        elif isinstance(message, CompletionSignal):
            if message.request_id != self.request_id:
                LOGGER.debug("Ignoring completion for request id %d", message.request_id)
                return False
            config.config_complete = True
            return True
        elif isinstance(message, Unhandled):
            LOGGER.debug("Ignoring '%s' message", message.variant)
        else:
            raise TypeError(f"Unsupported message type {type(message).__name__}")
        return False
