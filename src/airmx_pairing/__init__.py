"""AIRMX BLE Pairing Package.

  Pure Python package for pairing AIRMX air purifiers over BLE.
  """

from .device import AirmxDevice
from .discovery import discover_devices
from .exceptions import (
    AirmxError,
    BLEConnectionError,
    BLETimeoutError,
    BLEWriteError,
    IncompleteMessageError,
    KeyLookupError,
    MalformedPacketError,
    MissingPacketError,
    PairingTimeoutError,
    PayloadTooLargeError,
    ProtocolError,
    ReassemblyError,
)
from .key_exchange import KeyExchangeClient
from .models import (
    AIRMX_PRO,
    CompleteMessage,
    DeviceProfile,
    PairingPhase,
    PairingResult,
    WifiCredentials,
)
from .pairing import PairingSession
from .protocol import (
    NOTIFY_CHARACTERISTIC_UUID,
    SERVICE_UUID,
    WRITE_CHARACTERISTIC_UUID,
    CommandId,
)
from .transport import BLEConnection, Transport

__version__ = "0.1.0"

__all__ = [
    # Main API
    "AirmxDevice",
    "PairingSession",
    "KeyExchangeClient",
    "discover_devices",
    # Transport
    "BLEConnection",
    "Transport",
    # Exceptions
    "AirmxError",
    "BLEConnectionError",
    "BLETimeoutError",
    "BLEWriteError",
    "ProtocolError",
    "MalformedPacketError",
    "PayloadTooLargeError",
    "ReassemblyError",
    "IncompleteMessageError",
    "MissingPacketError",
    "PairingTimeoutError",
    "KeyLookupError",
    # Models
    "CompleteMessage",
    "DeviceProfile",
    "PairingPhase",
    "PairingResult",
    "WifiCredentials",
    "CommandId",
    # Constants
    "AIRMX_PRO",
    "SERVICE_UUID",
    "WRITE_CHARACTERISTIC_UUID",
    "NOTIFY_CHARACTERISTIC_UUID",
]
