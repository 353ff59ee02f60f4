"""Outbound command dispatch."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from .commands import CHUNK_SIZE, PACKET_INTERVAL, Command, build_command_payload
from .framing import OutgoingPacket, build_packets

if TYPE_CHECKING:
    from ..transport.base import Transport

_LOGGER = logging.getLogger(__name__)


class Dispatcher:
    """Frames commands and writes them packet by packet.

    The sequence number is shared by every command sent through one
    dispatcher and advances once per packet, starting at 1 and wrapping
    to 0 after 255. A new dispatcher starts counting from 1 again.
    """

    def __init__(
            self,
            transport: Transport,
            packet_interval: float = PACKET_INTERVAL,
            chunk_size: int = CHUNK_SIZE,
    ):
        """Initialize dispatcher.

        Args:
            transport: Connected transport to write packets to
            packet_interval: Delay after each packet write in seconds (default: 0.5)
            chunk_size: Payload bytes per packet (default: 16)
        """
        self._transport = transport
        self._packet_interval = packet_interval
        self._chunk_size = chunk_size
        self._sequence_number = 1

    @property
    def next_sequence_number(self) -> int:
        """Sequence number the next packet will carry."""
        return self._sequence_number

    def frame(self, command: Command) -> list[OutgoingPacket]:
        """Frame a command and consume sequence numbers for its packets.

        Raises:
            PayloadTooLargeError: If the payload needs more than 15 packets
        """
        packets = build_packets(
            build_command_payload(command),
            command.command_id,
            self._sequence_number,
            self._chunk_size,
        )
        self._sequence_number = (self._sequence_number + len(packets)) % 256
        return packets

    async def dispatch(self, command: Command) -> None:
        """Send a command, one packet at a time.

        Waits for every write to be acknowledged and for the packet interval
        to elapse after each packet, including the last one. Transport errors
        propagate unchanged.
        """
        packets = self.frame(command)

        _LOGGER.debug(
            "Dispatching %s (0x%02x) in %d packets",
            type(command).__name__,
            command.command_id,
            len(packets),
        )

        for packet in packets:
            data = packet.to_bytes()
            _LOGGER.debug("Sending chunk: %s", data.hex(" "))
            await self._transport.write_chunk(data)
            await asyncio.sleep(self._packet_interval)
