"""BLE pairing commands for AIRMX air purifiers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, ClassVar, Final, Union

if TYPE_CHECKING:
    from ..models.wifi import WifiCredentials


class CommandId(IntEnum):
    """Command identifiers carried in the last header byte."""

    HANDSHAKE = 0x0B          # Open the pairing exchange
    CONFIGURE_WIFI = 0x15     # Send SSID and password
    REQUEST_IDENTITY = 0x16   # Ask for the device identifier


# AIRMX Pro GATT layout
DEVICE_NAME: Final = "AIRMX Pro"
SERVICE_UUID: Final = "22210000-554a-4546-5542-46534450464d"
WRITE_CHARACTERISTIC_UUID: Final = "22210001-554a-4546-5542-46534450464d"
NOTIFY_CHARACTERISTIC_UUID: Final = "22210002-554a-4546-5542-46534450464d"

# Framing constants
HEADER_SIZE: Final = 4
CHUNK_SIZE: Final = 16  # Payload bytes per packet
MAX_PACKETS: Final = 15  # Packet counts are packed into nibbles
MAX_PAYLOAD_SIZE: Final = MAX_PACKETS * CHUNK_SIZE
UNENCRYPTED: Final = 0x00

# Timing
PACKET_INTERVAL: Final = 0.5  # Seconds between packet writes
PAIRING_TIMEOUT: Final = 30.0  # Seconds for the whole three-step exchange

HANDSHAKE_TOKEN: Final = bytes(8)
PROTOCOL_VERSION: Final = "1.0.0"


@dataclass(frozen=True)
class HandshakeCommand:
    """Opens the exchange with an empty token and the client version."""

    command_id: ClassVar[CommandId] = CommandId.HANDSHAKE

    token: bytes = HANDSHAKE_TOKEN
    version: str = PROTOCOL_VERSION


@dataclass(frozen=True)
class ConfigureWifiCommand:
    """Hands the Wi-Fi credentials to the purifier."""

    command_id: ClassVar[CommandId] = CommandId.CONFIGURE_WIFI

    ssid: str
    password: str

    @classmethod
    def from_credentials(cls, credentials: WifiCredentials) -> ConfigureWifiCommand:
        """Build the command from validated credentials."""
        return cls(ssid=credentials.ssid, password=credentials.password)


@dataclass(frozen=True)
class RequestIdentityCommand:
    """Asks the purifier for its device identifier."""

    command_id: ClassVar[CommandId] = CommandId.REQUEST_IDENTITY


Command = Union[HandshakeCommand, ConfigureWifiCommand, RequestIdentityCommand]


def _length_prefixed(data: bytes) -> bytes:
    if len(data) > 0xFF:
        raise ValueError(f"Field too long for 1-byte length prefix: {len(data)} bytes")
    return bytes([len(data)]) + data


def build_handshake_payload(command: HandshakeCommand) -> bytes:
    """Build the handshake payload.

    Format:
        [token_len:1][token:8][version_len:1][version:5]
        - token: all zero, the device issues no token before pairing
        - version: ASCII client version, "1.0.0"
    """
    return _length_prefixed(command.token) + _length_prefixed(command.version.encode("ascii"))


def build_configure_wifi_payload(command: ConfigureWifiCommand) -> bytes:
    """Build the Wi-Fi configuration payload.

    Format:
        [ssid_len:1][ssid:n][password_len:1][password:m]
        Both strings are UTF-8 encoded.
    """
    return (
        _length_prefixed(command.ssid.encode("utf-8"))
        + _length_prefixed(command.password.encode("utf-8"))
    )


def build_command_payload(command: Command) -> bytes:
    """Encode the payload of any pairing command.

    Raises:
        TypeError: If command is not one of the pairing commands
    """
    if isinstance(command, HandshakeCommand):
        return build_handshake_payload(command)
    if isinstance(command, ConfigureWifiCommand):
        return build_configure_wifi_payload(command)
    if isinstance(command, RequestIdentityCommand):
        return b""
    raise TypeError(f"Unsupported command type: {type(command).__name__}")
