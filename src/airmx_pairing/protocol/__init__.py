"""BLE pairing protocol implementation."""

from .commands import (
    CHUNK_SIZE,
    DEVICE_NAME,
    HEADER_SIZE,
    MAX_PACKETS,
    MAX_PAYLOAD_SIZE,
    NOTIFY_CHARACTERISTIC_UUID,
    PACKET_INTERVAL,
    PAIRING_TIMEOUT,
    SERVICE_UUID,
    WRITE_CHARACTERISTIC_UUID,
    Command,
    CommandId,
    ConfigureWifiCommand,
    HandshakeCommand,
    RequestIdentityCommand,
    build_command_payload,
)
from .framing import (
    IncomingPacket,
    OutgoingPacket,
    PacketHeader,
    build_packet_header,
    build_packets,
    parse_packet,
    parse_packet_header,
    split_payload,
)
from .chunking import MessageAssembler
from .dispatcher import Dispatcher
from .responses import parse_identity_response

__all__ = [
    "CommandId",
    "Command",
    "HandshakeCommand",
    "ConfigureWifiCommand",
    "RequestIdentityCommand",
    "build_command_payload",
    "DEVICE_NAME",
    "SERVICE_UUID",
    "WRITE_CHARACTERISTIC_UUID",
    "NOTIFY_CHARACTERISTIC_UUID",
    "CHUNK_SIZE",
    "HEADER_SIZE",
    "MAX_PACKETS",
    "MAX_PAYLOAD_SIZE",
    "PACKET_INTERVAL",
    "PAIRING_TIMEOUT",
    "PacketHeader",
    "OutgoingPacket",
    "IncomingPacket",
    "split_payload",
    "build_packet_header",
    "build_packets",
    "parse_packet_header",
    "parse_packet",
    "MessageAssembler",
    "Dispatcher",
    "parse_identity_response",
]
