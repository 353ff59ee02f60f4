"""Exceptions raised by the AIRMX pairing package."""

from __future__ import annotations


class AirmxError(Exception):
    """Base exception for all AIRMX pairing errors."""


class BLEConnectionError(AirmxError):
    """Device not found, connection failed or GATT layout unexpected."""


class BLETimeoutError(AirmxError):
    """BLE operation timed out."""


class BLEWriteError(BLEConnectionError):
    """Characteristic write rejected by the transport."""


class ProtocolError(AirmxError):
    """Packet or message violates the pairing protocol."""


class MalformedPacketError(ProtocolError):
    """Notification too short to contain a packet header."""


class PayloadTooLargeError(ProtocolError):
    """Command payload needs more packets than the header can count."""


class ReassemblyError(ProtocolError):
    """Inbound packets could not be assembled into a message."""


class IncompleteMessageError(ReassemblyError):
    """Final packet arrived but fewer packets than announced were received."""


class MissingPacketError(ReassemblyError):
    """Packets of a message arrived out of order or with gaps."""


class PairingTimeoutError(AirmxError):
    """Pairing exchange did not finish before the deadline."""


class KeyLookupError(AirmxError):
    """Device key could not be retrieved from the key exchange service."""
