"""Pairing exchange results."""

from __future__ import annotations

from dataclasses import dataclass

from .enums import PairingPhase


@dataclass(frozen=True)
class CompleteMessage:
    """A fully reassembled inbound message."""

    command_id: int
    payload: bytes

    def __repr__(self) -> str:
        return (
            f"CompleteMessage(command=0x{self.command_id:02X}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'})"
        )


@dataclass(frozen=True)
class PairingResult:
    """Outcome of one pairing attempt.

    Attributes:
        success: True if all three steps completed
        phase: Terminal phase (SUCCEEDED or FAILED)
        device_id: Identifier reported by the purifier, None if not reported
        error: The failure cause when success is False
    """

    success: bool
    phase: PairingPhase
    device_id: int | None = None
    error: Exception | None = None
