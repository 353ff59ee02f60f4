"""Test the pairing state machine against a fake transport."""

from __future__ import annotations

import asyncio

import pytest

from airmx_pairing.exceptions import (
    BLEConnectionError,
    BLETimeoutError,
    BLEWriteError,
    MissingPacketError,
    PairingTimeoutError,
)
from airmx_pairing.models.enums import PairingPhase
from airmx_pairing.models.pairing import PairingResult
from airmx_pairing.models.wifi import WifiCredentials
from airmx_pairing.pairing import PairingSession
from airmx_pairing.protocol.commands import CommandId
from conftest import FakeTransport, full_replies, notification

CREDENTIALS = WifiCredentials(ssid="Home", password="password1")


def _session(fake: FakeTransport, timeout: float = 1.0, **kwargs) -> PairingSession:
    return PairingSession(fake, timeout=timeout, packet_interval=0, **kwargs)


@pytest.mark.asyncio
async def test_pairing_succeeds_and_reports_device_id(transport: FakeTransport) -> None:
    phases: list[PairingPhase] = []
    session = _session(transport, on_phase_change=phases.append)

    result = await session.pair(CREDENTIALS)

    assert result == PairingResult(success=True, phase=PairingPhase.SUCCEEDED, device_id=300)
    assert session.phase == PairingPhase.SUCCEEDED
    assert session.phase_history == [
        PairingPhase.IDLE,
        PairingPhase.AWAITING_HANDSHAKE,
        PairingPhase.AWAITING_WIFI_ACK,
        PairingPhase.AWAITING_IDENTITY,
        PairingPhase.SUCCEEDED,
    ]
    assert phases == session.phase_history[1:]


@pytest.mark.asyncio
async def test_pairing_sends_commands_in_order(transport: FakeTransport) -> None:
    await _session(transport).pair(CREDENTIALS)

    assert transport.written == [
        b"\x01\x11\x00\x0b\x08" + bytes(8) + b"\x051.0.0",
        b"\x02\x11\x00\x15\x04Home\x09password1",
        b"\x03\x11\x00\x16",
    ]


@pytest.mark.asyncio
async def test_pairing_releases_transport_once(transport: FakeTransport) -> None:
    await _session(transport).pair(CREDENTIALS)

    assert transport.connect_calls == 1
    assert transport.subscribe_calls == 1
    assert transport.unsubscribe_calls == 1
    assert transport.disconnect_calls == 1
    assert not transport.is_connected


@pytest.mark.asyncio
async def test_multi_packet_identity_reply() -> None:
    replies = full_replies()
    replies[CommandId.REQUEST_IDENTITY] = [
        notification(CommandId.REQUEST_IDENTITY, b"\x04\x00", current=1, total=2),
        notification(CommandId.REQUEST_IDENTITY, b"\x00\x01\x2c", current=2, total=2, sequence=2),
    ]

    result = await _session(FakeTransport(replies)).pair(CREDENTIALS)

    assert result.success
    assert result.device_id == 300


@pytest.mark.asyncio
async def test_identity_without_identifier_still_succeeds() -> None:
    fake = FakeTransport(full_replies(identity=b"\x00"))

    result = await _session(fake).pair(CREDENTIALS)

    assert result.success
    assert result.device_id is None


@pytest.mark.asyncio
async def test_timeout_fails_exactly_once() -> None:
    fake = FakeTransport(replies={})
    session = _session(fake, timeout=0.05)

    result = await session.pair(CREDENTIALS)

    assert not result.success
    assert result.phase == PairingPhase.FAILED
    assert isinstance(result.error, PairingTimeoutError)
    assert session.phase_history.count(PairingPhase.FAILED) == 1
    assert session.phase_history[-2] == PairingPhase.AWAITING_HANDSHAKE
    assert fake.disconnect_calls == 1


@pytest.mark.asyncio
async def test_timeout_while_waiting_for_identity() -> None:
    replies = full_replies()
    del replies[CommandId.REQUEST_IDENTITY]
    fake = FakeTransport(replies)
    session = _session(fake, timeout=0.05)

    result = await session.pair(CREDENTIALS)

    assert isinstance(result.error, PairingTimeoutError)
    assert session.phase_history[-2:] == [PairingPhase.AWAITING_IDENTITY, PairingPhase.FAILED]
    assert fake.disconnect_calls == 1


@pytest.mark.asyncio
async def test_unexpected_reply_is_ignored() -> None:
    replies = full_replies()
    replies[CommandId.HANDSHAKE] = [
        notification(CommandId.REQUEST_IDENTITY, b"\x04\x00\x00\x00\x01"),
        notification(0x42, b"\x01"),
        notification(CommandId.HANDSHAKE, b"\x00"),
    ]

    result = await _session(FakeTransport(replies)).pair(CREDENTIALS)

    assert result.success
    assert result.device_id == 300


@pytest.mark.asyncio
async def test_malformed_notification_is_discarded() -> None:
    replies = full_replies()
    replies[CommandId.HANDSHAKE] = [b"\x01\x11", notification(CommandId.HANDSHAKE)]

    result = await _session(FakeTransport(replies)).pair(CREDENTIALS)

    assert result.success


@pytest.mark.asyncio
async def test_reassembly_fault_fails_pairing() -> None:
    replies = full_replies()
    replies[CommandId.HANDSHAKE] = [
        notification(CommandId.HANDSHAKE, b"b", current=2, total=3),
        notification(CommandId.HANDSHAKE, b"a", current=1, total=3),
        notification(CommandId.HANDSHAKE, b"c", current=3, total=3),
    ]
    fake = FakeTransport(replies)
    session = _session(fake)

    result = await session.pair(CREDENTIALS)

    assert not result.success
    assert isinstance(result.error, MissingPacketError)
    assert len(fake.written) == 1  # ConfigureWifi never sent
    assert fake.disconnect_calls == 1


@pytest.mark.asyncio
async def test_connect_failure_fails_pairing() -> None:
    fake = FakeTransport(connect_error=BLEConnectionError("Device AIRMX Pro not found during scan"))
    session = _session(fake)

    result = await session.pair(CREDENTIALS)

    assert not result.success
    assert isinstance(result.error, BLEConnectionError)
    assert session.phase_history == [
        PairingPhase.IDLE,
        PairingPhase.AWAITING_HANDSHAKE,
        PairingPhase.FAILED,
    ]
    assert fake.written == []
    assert fake.unsubscribe_calls == 0
    assert fake.disconnect_calls == 1


@pytest.mark.asyncio
async def test_write_failure_fails_pairing() -> None:
    fake = FakeTransport(full_replies(), write_error=BLEWriteError("Write failed: rejected"))

    result = await _session(fake).pair(CREDENTIALS)

    assert not result.success
    assert isinstance(result.error, BLEWriteError)
    assert fake.disconnect_calls == 1


@pytest.mark.asyncio
async def test_retry_starts_fresh_attempt() -> None:
    fake = FakeTransport(replies={})
    session = _session(fake, timeout=0.2)

    first = await session.pair(CREDENTIALS)
    assert not first.success
    first_attempt_writes = len(fake.written)

    fake.replies = full_replies()
    second = await session.retry()

    assert second.success
    assert second.device_id == 300
    assert session.phase_history[0] == PairingPhase.IDLE
    assert session.phase_history.count(PairingPhase.FAILED) == 0
    # New dispatcher: sequence numbers restart at 1
    assert [p[0] for p in fake.written[first_attempt_writes:]] == [1, 2, 3]
    assert fake.connect_calls == 2
    assert fake.disconnect_calls == 2


@pytest.mark.asyncio
async def test_retry_without_previous_attempt() -> None:
    with pytest.raises(RuntimeError, match="No previous pairing attempt"):
        await _session(FakeTransport()).retry()


@pytest.mark.asyncio
async def test_pair_while_running_is_rejected(transport: FakeTransport) -> None:
    session = PairingSession(transport, timeout=1.0, packet_interval=0.05)

    task = asyncio.create_task(session.pair(CREDENTIALS))
    await asyncio.sleep(0.01)

    assert session.phase.is_running
    with pytest.raises(RuntimeError, match="already in progress"):
        await session.pair(CREDENTIALS)
    with pytest.raises(RuntimeError, match="in progress"):
        session.reset()

    result = await task
    assert result.success


@pytest.mark.asyncio
async def test_cancelled_attempt_fails_and_disconnects(transport: FakeTransport) -> None:
    session = PairingSession(transport, timeout=5.0, packet_interval=1.0)

    task = asyncio.create_task(session.pair(CREDENTIALS))
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert session.phase == PairingPhase.FAILED
    assert transport.disconnect_calls == 1


@pytest.mark.asyncio
async def test_late_failure_does_not_override_success(transport: FakeTransport) -> None:
    session = _session(transport)
    result = await session.pair(CREDENTIALS)

    late = session._fail(PairingTimeoutError("late"))

    assert late is result
    assert session.phase == PairingPhase.SUCCEEDED
    assert session.phase_history.count(PairingPhase.FAILED) == 0


def test_reset_returns_to_idle() -> None:
    session = _session(FakeTransport())
    session.reset()

    assert session.phase == PairingPhase.IDLE
    assert session.phase_history == [PairingPhase.IDLE]
    assert session.result is None


@pytest.mark.asyncio
async def test_disconnect_failure_keeps_successful_result() -> None:
    fake = FakeTransport(full_replies(), disconnect_error=asyncio.TimeoutError())
    session = _session(fake)

    result = await session.pair(CREDENTIALS)

    assert result == PairingResult(success=True, phase=PairingPhase.SUCCEEDED, device_id=300)
    assert session.result is result
    assert fake.disconnect_calls == 1


@pytest.mark.asyncio
async def test_disconnect_failure_keeps_failed_result() -> None:
    fake = FakeTransport(
        full_replies(),
        write_error=BLEWriteError("Write failed: rejected"),
        disconnect_error=RuntimeError("adapter gone"),
    )

    result = await _session(fake).pair(CREDENTIALS)

    assert not result.success
    assert isinstance(result.error, BLEWriteError)


@pytest.mark.asyncio
async def test_transport_timeout_is_not_reported_as_deadline() -> None:
    fake = FakeTransport(full_replies(), write_error=TimeoutError("GATT write timed out"))
    session = _session(fake, timeout=5.0)

    result = await session.pair(CREDENTIALS)

    assert not result.success
    assert isinstance(result.error, BLETimeoutError)
    assert not isinstance(result.error, PairingTimeoutError)
    assert "GATT write timed out" in str(result.error)
    assert session.phase_history[-2:] == [PairingPhase.AWAITING_HANDSHAKE, PairingPhase.FAILED]


@pytest.mark.parametrize("timeout", [0.055, 0.06, 0.065])
@pytest.mark.asyncio
async def test_final_reply_racing_deadline_has_single_outcome(timeout: float) -> None:
    # Three single-packet commands with a 20 ms gap after each: the identity
    # reply lands right around the deadline.
    fake = FakeTransport(full_replies())
    session = PairingSession(fake, timeout=timeout, packet_interval=0.02)

    result = await session.pair(CREDENTIALS)

    terminal = [phase for phase in session.phase_history if phase.is_terminal]
    assert terminal == [result.phase]
    assert session.result is result
    if result.success:
        assert result.device_id == 300
    else:
        assert isinstance(result.error, PairingTimeoutError)
    assert fake.disconnect_calls == 1
