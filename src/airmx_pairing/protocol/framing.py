"""Packet framing for the AIRMX pairing protocol.

Packet layout::

    +----------+-----------------+-----------+---------+----------------+
    | Sequence | Current | Total | Encrypted | Command |    Payload     |
    | 1 byte   | hi nib  | lo nib|  1 byte   | 1 byte  |  0-16 bytes    |
    +----------+-----------------+-----------+---------+----------------+

- Sequence: per-packet counter owned by the sender
- Current/Total: 1-based packet index and packet count of the message
- Encrypted: always 0x00, packets are sent in the clear
- Command: the command identifier of the message
"""

from __future__ import annotations

from dataclasses import dataclass

from ..exceptions import MalformedPacketError, PayloadTooLargeError
from .commands import CHUNK_SIZE, HEADER_SIZE, MAX_PACKETS, UNENCRYPTED


@dataclass(frozen=True)
class PacketHeader:
    """Decoded 4-byte packet header."""

    sequence_number: int
    current_packet: int
    total_packet: int
    encrypted: int
    command_id: int

    @property
    def is_last(self) -> bool:
        """True if this packet closes its message."""
        return self.current_packet == self.total_packet


@dataclass(frozen=True)
class OutgoingPacket:
    """A framed packet ready to be written to the device."""

    header: PacketHeader
    chunk: bytes

    def to_bytes(self) -> bytes:
        return build_packet_header(
            self.header.sequence_number,
            self.header.current_packet,
            self.header.total_packet,
            self.header.command_id,
        ) + self.chunk


@dataclass(frozen=True)
class IncomingPacket:
    """A packet received as a notification."""

    header: PacketHeader
    payload: bytes

    @property
    def current_packet(self) -> int:
        return self.header.current_packet

    @property
    def total_packet(self) -> int:
        return self.header.total_packet

    @property
    def command_id(self) -> int:
        return self.header.command_id

    def __repr__(self) -> str:
        return (
            f"IncomingPacket(seq={self.header.sequence_number}, "
            f"{self.current_packet}/{self.total_packet}, "
            f"command=0x{self.command_id:02X}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'})"
        )


def split_payload(payload: bytes, chunk_size: int = CHUNK_SIZE) -> list[bytes]:
    """Split a payload into consecutive chunks of at most chunk_size bytes.

    An empty payload yields a single empty chunk, so every command is sent
    as at least one packet.
    """
    if chunk_size < 1:
        raise ValueError(f"Chunk size must be positive, got {chunk_size}")
    if not payload:
        return [b""]
    return [payload[i:i + chunk_size] for i in range(0, len(payload), chunk_size)]


def build_packet_header(
        sequence_number: int,
        current_packet: int,
        total_packet: int,
        command_id: int,
) -> bytes:
    """Pack the 4-byte packet header.

    Args:
        sequence_number: Packet sequence number (truncated to one byte)
        current_packet: 1-based index of this packet (1-15)
        total_packet: Number of packets in the message (1-15)
        command_id: Command identifier

    Returns:
        Header bytes: [seq][current << 4 | total][0x00][command]

    Raises:
        ValueError: If the packet counts do not fit in a nibble
    """
    if not 1 <= total_packet <= MAX_PACKETS:
        raise ValueError(f"Total packet count out of range: {total_packet} (must be 1-{MAX_PACKETS})")
    if not 1 <= current_packet <= total_packet:
        raise ValueError(
            f"Current packet out of range: {current_packet} (must be 1-{total_packet})"
        )

    return bytes([
        sequence_number & 0xFF,
        (current_packet << 4) | total_packet,
        UNENCRYPTED,
        command_id & 0xFF,
    ])


def build_packets(
        payload: bytes,
        command_id: int,
        first_sequence: int,
        chunk_size: int = CHUNK_SIZE,
) -> list[OutgoingPacket]:
    """Frame a command payload into sequenced packets.

    Args:
        payload: Complete command payload
        command_id: Command identifier written into every header
        first_sequence: Sequence number of the first packet
        chunk_size: Payload bytes per packet (default: 16)

    Returns:
        Packets in send order, sequence numbers increasing by one (mod 256)

    Raises:
        PayloadTooLargeError: If more than 15 packets would be needed
    """
    chunks = split_payload(payload, chunk_size)
    total = len(chunks)
    if total > MAX_PACKETS:
        raise PayloadTooLargeError(
            f"Payload of {len(payload)} bytes needs {total} packets "
            f"(maximum {MAX_PACKETS})"
        )

    return [
        OutgoingPacket(
            header=PacketHeader(
                sequence_number=(first_sequence + index) & 0xFF,
                current_packet=index + 1,
                total_packet=total,
                encrypted=UNENCRYPTED,
                command_id=command_id,
            ),
            chunk=chunk,
        )
        for index, chunk in enumerate(chunks)
    ]


def parse_packet_header(data: bytes) -> PacketHeader:
    """Decode the 4-byte header at the start of a packet.

    Raises:
        MalformedPacketError: If fewer than 4 bytes are supplied
    """
    if len(data) < HEADER_SIZE:
        raise MalformedPacketError(
            f"Packet too short: {len(data)} bytes (need at least {HEADER_SIZE})"
        )

    return PacketHeader(
        sequence_number=data[0],
        current_packet=(data[1] >> 4) & 0x0F,
        total_packet=data[1] & 0x0F,
        encrypted=data[2],
        command_id=data[3],
    )


def parse_packet(data: bytes) -> IncomingPacket:
    """Decode a raw notification into header and payload."""
    header = parse_packet_header(data)
    return IncomingPacket(header=header, payload=bytes(data[HEADER_SIZE:]))
