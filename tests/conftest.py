"""Shared fakes for pairing tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from airmx_pairing.protocol.commands import CommandId


def notification(
        command_id: int,
        payload: bytes = b"",
        current: int = 1,
        total: int = 1,
        sequence: int = 1,
) -> bytes:
    """Build a raw device notification."""
    return bytes([sequence, (current << 4) | total, 0x00, command_id]) + payload


IDENTITY_300 = bytes([0x04, 0x00, 0x00, 0x01, 0x2C])


def full_replies(identity: bytes = IDENTITY_300) -> dict[int, list[bytes]]:
    """Replies that let a pairing attempt run to completion."""
    return {
        CommandId.HANDSHAKE: [notification(CommandId.HANDSHAKE, b"\x00")],
        CommandId.CONFIGURE_WIFI: [notification(CommandId.CONFIGURE_WIFI, b"\x00")],
        CommandId.REQUEST_IDENTITY: [notification(CommandId.REQUEST_IDENTITY, identity)],
    }


class FakeTransport:
    """In-memory transport that answers commands with canned notifications.

    When the last packet of a command is written, the notifications listed
    for its command id are delivered to the subscribed callback.
    """

    def __init__(
            self,
            replies: dict[int, list[bytes]] | None = None,
            connect_error: Exception | None = None,
            write_error: Exception | None = None,
            disconnect_error: Exception | None = None,
    ):
        self.replies = dict(replies or {})
        self.connect_error = connect_error
        self.write_error = write_error
        self.disconnect_error = disconnect_error

        self.written: list[bytes] = []
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.subscribe_calls = 0
        self.unsubscribe_calls = 0
        self._callback: Callable[[bytes], None] | None = None
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.connect_error:
            raise self.connect_error
        self._connected = True

    async def write_chunk(self, data: bytes) -> None:
        if self.write_error:
            raise self.write_error
        self.written.append(data)

        current, total = data[1] >> 4, data[1] & 0x0F
        if current == total and self._callback:
            for raw in self.replies.get(data[3], []):
                self._callback(raw)

    async def subscribe(self, callback: Callable[[bytes], None]) -> None:
        self.subscribe_calls += 1
        self._callback = callback

    async def unsubscribe(self) -> None:
        self.unsubscribe_calls += 1
        self._callback = None

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        self._connected = False
        if self.disconnect_error:
            raise self.disconnect_error


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport(replies=full_replies())
