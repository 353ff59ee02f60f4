"""Pairing state machine for AIRMX purifiers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Union

from .exceptions import (
    AirmxError,
    BLETimeoutError,
    MalformedPacketError,
    PairingTimeoutError,
    ReassemblyError,
)
from .models.enums import PairingPhase
from .models.pairing import CompleteMessage, PairingResult
from .protocol import (
    PACKET_INTERVAL,
    PAIRING_TIMEOUT,
    Command,
    ConfigureWifiCommand,
    Dispatcher,
    HandshakeCommand,
    MessageAssembler,
    RequestIdentityCommand,
    parse_identity_response,
    parse_packet,
)

if TYPE_CHECKING:
    from .models.wifi import WifiCredentials
    from .transport.base import NotificationCallback, Transport

_LOGGER = logging.getLogger(__name__)

InboxItem = Union[CompleteMessage, ReassemblyError]


class PairingSession:
    """Drives the handshake, Wi-Fi configuration and identity exchange.

    Usage:
        session = PairingSession(BLEConnection())
        result = await session.pair(WifiCredentials("Home", "password1"))
        if not result.success:
            result = await session.retry()

    Each attempt connects the transport, sends the three commands in order
    and waits for the device to answer each one before sending the next.
    The whole exchange is bounded by a single deadline. Notifications are
    decoded in the transport callback and handed to the driver loop through
    a queue; only the driver loop changes phase.
    """

    def __init__(
            self,
            transport: Transport,
            timeout: float = PAIRING_TIMEOUT,
            packet_interval: float = PACKET_INTERVAL,
            on_phase_change: Callable[[PairingPhase], None] | None = None,
    ):
        """Initialize pairing session.

        Args:
            transport: Link to the purifier (connected on each attempt)
            timeout: Deadline for the whole exchange in seconds (default: 30)
            packet_interval: Delay after each packet write in seconds (default: 0.5)
            on_phase_change: Optional callback invoked with every new phase
        """
        self._transport = transport
        self._timeout = timeout
        self._packet_interval = packet_interval
        self._on_phase_change = on_phase_change

        self._phase = PairingPhase.IDLE
        self._phase_history: list[PairingPhase] = [PairingPhase.IDLE]
        self._credentials: WifiCredentials | None = None
        self._result: PairingResult | None = None

        self._dispatcher: Dispatcher | None = None
        self._assembler: MessageAssembler | None = None
        self._inbox: asyncio.Queue[InboxItem] | None = None

    @property
    def phase(self) -> PairingPhase:
        """Current phase of the exchange."""
        return self._phase

    @property
    def phase_history(self) -> list[PairingPhase]:
        """Phases entered since the last reset, oldest first."""
        return list(self._phase_history)

    @property
    def result(self) -> PairingResult | None:
        """Outcome of the last finished attempt."""
        return self._result

    def reset(self) -> None:
        """Return a finished session to IDLE.

        Raises:
            RuntimeError: If an attempt is still running
        """
        if self._phase.is_running:
            raise RuntimeError("Cannot reset while pairing is in progress")

        self._phase = PairingPhase.IDLE
        self._phase_history = [PairingPhase.IDLE]
        self._result = None
        self._dispatcher = None
        self._assembler = None
        self._inbox = None

    async def pair(self, credentials: WifiCredentials) -> PairingResult:
        """Run one pairing attempt.

        Args:
            credentials: Validated Wi-Fi credentials for the purifier

        Returns:
            PairingResult; failures are reported here rather than raised

        Raises:
            RuntimeError: If an attempt is already running
        """
        if self._phase.is_running:
            raise RuntimeError("Pairing already in progress")

        self.reset()
        self._credentials = credentials

        # Fresh sequence counter and reassembly bag for every attempt
        self._dispatcher = Dispatcher(self._transport, packet_interval=self._packet_interval)
        self._assembler = MessageAssembler()
        self._inbox = asyncio.Queue()

        commands: list[tuple[PairingPhase, Command]] = [
            (PairingPhase.AWAITING_HANDSHAKE, HandshakeCommand()),
            (PairingPhase.AWAITING_WIFI_ACK, ConfigureWifiCommand.from_credentials(credentials)),
            (PairingPhase.AWAITING_IDENTITY, RequestIdentityCommand()),
        ]

        self._transition(PairingPhase.AWAITING_HANDSHAKE)
        subscribed = False

        try:
            await self._transport.connect()
            await self._transport.subscribe(
                self._notification_handler(self._assembler, self._inbox)
            )
            subscribed = True

            try:
                reply = await asyncio.wait_for(
                    self._exchange(commands),
                    timeout=self._timeout,
                )
            except asyncio.TimeoutError as e:
                raise PairingTimeoutError(
                    f"Pairing did not finish within {self._timeout}s"
                ) from e
        except AirmxError as e:
            result = self._fail(e)
        except BaseException as e:
            self._fail(e)
            raise
        else:
            result = self._succeed(reply)
        finally:
            await self._release(subscribed)

        return result

    async def retry(self) -> PairingResult:
        """Restart pairing from IDLE with the last credentials.

        Raises:
            RuntimeError: If no attempt was made yet or one is still running
        """
        if self._credentials is None:
            raise RuntimeError("No previous pairing attempt to retry")

        _LOGGER.info("Retrying pairing")
        return await self.pair(self._credentials)

    def _notification_handler(
            self,
            assembler: MessageAssembler,
            inbox: asyncio.Queue[InboxItem],
    ) -> NotificationCallback:
        """Build the transport callback for one attempt."""

        def _handle(data: bytes) -> None:
            try:
                packet = parse_packet(data)
            except MalformedPacketError as e:
                _LOGGER.warning("Discarding notification %s: %s", data.hex(" "), e)
                return

            try:
                message = assembler.add_packet(packet)
            except ReassemblyError as e:
                inbox.put_nowait(e)
                return

            if message is not None:
                inbox.put_nowait(message)

        return _handle

    async def _exchange(self, commands: list[tuple[PairingPhase, Command]]) -> CompleteMessage:
        """Send each command and wait for its reply.

        Raises:
            BLETimeoutError: If the transport times out; only the pairing
                deadline surfaces as asyncio.TimeoutError
        """
        assert self._dispatcher is not None

        reply: CompleteMessage | None = None
        for phase, command in commands:
            self._transition(phase)
            try:
                await self._dispatcher.dispatch(command)
            except (asyncio.TimeoutError, TimeoutError) as e:
                raise BLETimeoutError(f"Transport timed out during {phase.value}: {e}") from e
            reply = await self._wait_for_reply(command.command_id)

        assert reply is not None
        return reply

    async def _wait_for_reply(self, command_id: int) -> CompleteMessage:
        """Wait for the reply to command_id, skipping unrelated messages.

        Raises:
            ReassemblyError: If the device sent a malformed message
        """
        assert self._inbox is not None

        while True:
            item = await self._inbox.get()
            if isinstance(item, ReassemblyError):
                raise item

            if item.command_id == command_id:
                _LOGGER.debug("Received reply %r", item)
                return item

            _LOGGER.warning(
                "Ignoring message 0x%02x while %s (expected 0x%02x)",
                item.command_id,
                self._phase.value,
                command_id,
            )

    def _transition(self, phase: PairingPhase) -> None:
        if phase == self._phase:
            return

        _LOGGER.info("Pairing phase: %s -> %s", self._phase.value, phase.value)
        self._phase = phase
        self._phase_history.append(phase)

        if self._on_phase_change:
            self._on_phase_change(phase)

    def _finish(self, result: PairingResult) -> PairingResult:
        """Record the terminal outcome; the first one recorded wins."""
        if self._phase.is_terminal and self._result is not None:
            return self._result

        self._result = result
        self._transition(result.phase)
        return result

    def _succeed(self, reply: CompleteMessage) -> PairingResult:
        device_id = parse_identity_response(reply.payload)
        if device_id is None:
            _LOGGER.warning("Device reported no identifier: %s", reply.payload.hex(" "))
        else:
            _LOGGER.info("Pairing succeeded, device id %d", device_id)

        return self._finish(
            PairingResult(
                success=True,
                phase=PairingPhase.SUCCEEDED,
                device_id=device_id,
            )
        )

    def _fail(self, error: BaseException) -> PairingResult:
        _LOGGER.warning("Pairing failed during %s: %s", self._phase.value, error)

        return self._finish(
            PairingResult(
                success=False,
                phase=PairingPhase.FAILED,
                error=error if isinstance(error, Exception) else None,
            )
        )

    async def _release(self, subscribed: bool) -> None:
        """Stop notifications and disconnect after an attempt."""
        if subscribed:
            try:
                await self._transport.unsubscribe()
            except Exception as e:
                _LOGGER.warning("Error stopping notifications: %s", e)

        try:
            await self._transport.disconnect()
        except Exception as e:
            _LOGGER.warning("Error during disconnect: %s", e)
