from __future__ import annotations

from enum import Enum
from typing import Final


class PairingPhase(str, Enum):
    """Phases of the three-step pairing exchange."""
    IDLE = "idle"
    AWAITING_HANDSHAKE = "awaiting_handshake"
    AWAITING_WIFI_ACK = "awaiting_wifi_ack"
    AWAITING_IDENTITY = "awaiting_identity"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """True for phases that end an attempt."""
        return self in TERMINAL_PHASES

    @property
    def is_running(self) -> bool:
        """True while a pairing exchange is in flight."""
        return self not in TERMINAL_PHASES and self is not PairingPhase.IDLE


TERMINAL_PHASES: Final[frozenset[PairingPhase]] = frozenset({
    PairingPhase.SUCCEEDED,
    PairingPhase.FAILED,
})
