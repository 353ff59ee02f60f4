"""Data models for AIRMX pairing."""

from .device import AIRMX_PRO, DeviceProfile
from .enums import TERMINAL_PHASES, PairingPhase
from .pairing import CompleteMessage, PairingResult
from .wifi import WifiCredentials

__all__ = [
    "AIRMX_PRO",
    "CompleteMessage",
    "DeviceProfile",
    "PairingPhase",
    "PairingResult",
    "TERMINAL_PHASES",
    "WifiCredentials",
]
