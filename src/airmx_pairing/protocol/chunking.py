"""Multi-packet message assembly for BLE notifications."""

from __future__ import annotations

import logging

from ..exceptions import IncompleteMessageError, MissingPacketError
from ..models.pairing import CompleteMessage
from .framing import IncomingPacket

_LOGGER = logging.getLogger(__name__)


class MessageAssembler:
    """Assembles one inbound message at a time from framed packets.

    The device answers each command with one or more packets whose headers
    carry [current:4][total:4]. Packets are collected in arrival order until
    one closes the message (current == total), then the collected packets
    must be exactly 1..total in ascending order.

    Only one message is assembled at a time; interleaved messages are not
    supported.
    """

    def __init__(self) -> None:
        self._bag: list[IncomingPacket] = []

    def add_packet(self, packet: IncomingPacket) -> CompleteMessage | None:
        """Add a packet to the message in flight.

        Args:
            packet: Decoded notification packet

        Returns:
            The complete message if this packet closed it, None otherwise

        Raises:
            IncompleteMessageError: If the closing packet arrived before all others
            MissingPacketError: If packets arrived out of order
        """
        self._bag.append(packet)

        if not packet.header.is_last:
            return None

        try:
            return self._complete(packet)
        finally:
            self._bag.clear()

    def _complete(self, last: IncomingPacket) -> CompleteMessage:
        if len(self._bag) != last.total_packet:
            raise IncompleteMessageError(
                f"Message 0x{last.command_id:02X} incomplete: "
                f"have {len(self._bag)}/{last.total_packet} packets"
            )

        for index, packet in enumerate(self._bag):
            if packet.current_packet != index + 1:
                raise MissingPacketError(
                    f"Message 0x{last.command_id:02X} out of order: expected packet "
                    f"{index + 1} at position {index}, got {packet.current_packet}"
                )

        payload = b"".join(packet.payload for packet in self._bag)

        _LOGGER.debug(
            "Assembled message 0x%02x from %d packets (%d bytes)",
            last.command_id,
            len(self._bag),
            len(payload),
        )

        return CompleteMessage(command_id=last.command_id, payload=payload)

    def reset(self) -> None:
        """Drop any partially received message."""
        if self._bag:
            _LOGGER.debug("Discarding %d pending packets", len(self._bag))
        self._bag.clear()

    @property
    def is_pending(self) -> bool:
        """Check if a message is partially received."""
        return bool(self._bag)

    @property
    def packets_received(self) -> int:
        """Get number of packets of the pending message."""
        return len(self._bag)
