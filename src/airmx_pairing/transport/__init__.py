"""BLE transport layer."""

from .base import NotificationCallback, Transport
from .connection import BLEConnection

__all__ = [
    "BLEConnection",
    "NotificationCallback",
    "Transport",
]
