"""Transport interface used by the pairing protocol."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

NotificationCallback = Callable[[bytes], None]


class Transport(Protocol):
    """Write/notify link to a purifier.

    BLEConnection implements this over bleak; tests supply fakes.
    """

    @property
    def is_connected(self) -> bool:
        """Check if currently connected to the device."""

    async def connect(self) -> None:
        """Connect and resolve the write/notify characteristics.

        Raises:
            BLEConnectionError: If the device or its characteristics are missing
        """

    async def write_chunk(self, data: bytes) -> None:
        """Write one framed packet, waiting for the write acknowledgement.

        Raises:
            BLEWriteError: If the write is rejected
        """

    async def subscribe(self, callback: NotificationCallback) -> None:
        """Deliver every notification's raw bytes to callback."""

    async def unsubscribe(self) -> None:
        """Stop delivering notifications."""

    async def disconnect(self) -> None:
        """Disconnect; safe to call when not connected."""
