"""BLE connection management."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from bleak import BleakClient, BleakScanner
from bleak.exc import BleakError
from bleak_retry_connector import BleakClientWithServiceCache, establish_connection

from ..exceptions import BLEConnectionError, BLETimeoutError, BLEWriteError
from ..models.device import AIRMX_PRO, DeviceProfile

if TYPE_CHECKING:
    from bleak.backends.characteristic import BleakGATTCharacteristic
    from bleak.backends.device import BLEDevice

    from .base import NotificationCallback

_LOGGER = logging.getLogger(__name__)


class BLEConnection:
    """Manages the BLE link to an AIRMX purifier.

    Features:
    - Automatic retry logic with bleak-retry-connector
    - Service caching for faster reconnections
    - Context manager for automatic cleanup
    - Separate write and notify characteristics
    """

    def __init__(
            self,
            profile: DeviceProfile = AIRMX_PRO,
            ble_device: BLEDevice | None = None,
            address: str | None = None,
            timeout: float = 10.0,
            max_attempts: int = 4,
            use_services_cache: bool = True,
    ):
        """Initialize BLE connection manager.

        Args:
            profile: Device name and GATT layout (default: AIRMX Pro)
            ble_device: Optional BLEDevice from an earlier scan
            address: Optional MAC address; if neither is given, scan by name
            timeout: Connection timeout in seconds (default: 10)
            max_attempts: Maximum connection attempts for bleak-retry-connector (default: 4)
            use_services_cache: Enable GATT service caching for faster reconnections (default: True)
        """
        self.profile = profile
        self.ble_device = ble_device
        self.address = address
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.use_services_cache = use_services_cache

        self._client: BleakClient | None = None
        self._write_characteristic: BleakGATTCharacteristic | None = None
        self._notify_characteristic: BleakGATTCharacteristic | None = None
        self._notifying = False

    async def __aenter__(self) -> BLEConnection:
        """Connect to device (context manager entry)."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect from device (context manager exit)."""
        await self.disconnect()

    async def _resolve_device(self) -> BLEDevice:
        if self.ble_device:
            return self.ble_device

        if self.address:
            device = await BleakScanner.find_device_by_address(
                self.address,
                timeout=self.timeout,
            )
            target = self.address
        else:
            device = await BleakScanner.find_device_by_name(
                self.profile.name,
                timeout=self.timeout,
            )
            target = self.profile.name

        if device is None:
            raise BLEConnectionError(f"Device {target} not found during scan")
        return device

    async def connect(self) -> None:
        """Establish BLE connection to device.

        Uses bleak-retry-connector for automatic retry logic and service caching.

        Raises:
            BLEConnectionError: If connection fails or characteristics are missing
            BLETimeoutError: If connection times out
        """
        if self._client and self._client.is_connected:
            return  # Already connected

        try:
            device = await self._resolve_device()

            _LOGGER.debug(
                "Connecting to %s (%s) with bleak-retry-connector (max_attempts=%d)",
                device.name,
                device.address,
                self.max_attempts,
            )

            self._client = await establish_connection(
                client_class=BleakClientWithServiceCache,
                device=device,
                name=device.name or self.profile.name,
                max_attempts=self.max_attempts,
                use_services_cache=self.use_services_cache,
                timeout=self.timeout,
            )

            _LOGGER.debug("Connected to %s", device.address)

            self._resolve_characteristics()

        except BLEConnectionError:
            await self.disconnect()
            raise
        except asyncio.TimeoutError as e:
            await self.disconnect()
            raise BLETimeoutError(
                f"Connection timeout after {self.timeout}s"
            ) from e
        except Exception as e:
            await self.disconnect()
            raise BLEConnectionError(
                f"Failed to connect: {e}"
            ) from e

    def _resolve_characteristics(self) -> None:
        """Find the write and notify characteristics of the pairing service.

        Raises:
            BLEConnectionError: If service/characteristic not found
        """
        if not self._client or not self._client.is_connected:
            raise BLEConnectionError("Not connected")

        service = self._client.services.get_service(self.profile.service_uuid)
        if not service:
            raise BLEConnectionError(
                f"Service {self.profile.service_uuid} not found"
            )

        self._write_characteristic = service.get_characteristic(
            self.profile.write_characteristic_uuid
        )
        if not self._write_characteristic:
            raise BLEConnectionError(
                f"Write characteristic {self.profile.write_characteristic_uuid} not found"
            )

        self._notify_characteristic = service.get_characteristic(
            self.profile.notify_characteristic_uuid
        )
        if not self._notify_characteristic:
            raise BLEConnectionError(
                f"Notify characteristic {self.profile.notify_characteristic_uuid} not found"
            )

    async def disconnect(self) -> None:
        """Disconnect from device."""
        client = self._client
        self._client = None
        self._write_characteristic = None
        self._notify_characteristic = None
        self._notifying = False

        if client and client.is_connected:
            try:
                _LOGGER.debug("Disconnecting from %s", client.address)
                await client.disconnect()
            except Exception as e:
                _LOGGER.warning("Error during disconnect: %s", e)

    async def subscribe(self, callback: NotificationCallback) -> None:
        """Start notifications and forward their bytes to callback.

        Raises:
            BLEConnectionError: If not connected or notifications cannot be enabled
        """
        if not self._client or not self._client.is_connected or not self._notify_characteristic:
            raise BLEConnectionError("Not connected")

        def _handle_notification(_: BleakGATTCharacteristic, data: bytearray) -> None:
            _LOGGER.debug("Received notification: %s", data.hex(" "))
            callback(bytes(data))

        try:
            await self._client.start_notify(
                self._notify_characteristic,
                _handle_notification,
            )
        except BleakError as e:
            raise BLEConnectionError(f"Failed to start notifications: {e}") from e

        self._notifying = True
        _LOGGER.debug("Notifications started")

    async def unsubscribe(self) -> None:
        """Stop notifications if they are running."""
        if not self._notifying:
            return
        self._notifying = False

        if self._client and self._client.is_connected and self._notify_characteristic:
            try:
                await self._client.stop_notify(self._notify_characteristic)
            except BleakError as e:
                _LOGGER.warning("Error stopping notifications: %s", e)

    async def write_chunk(self, data: bytes) -> None:
        """Write one packet to the device.

        Args:
            data: Framed packet bytes

        Raises:
            BLEWriteError: If not connected or write fails
        """
        if not self._client or not self._client.is_connected:
            raise BLEWriteError("Not connected")

        if not self._write_characteristic:
            raise BLEWriteError("Write characteristic not resolved")

        try:
            await self._client.write_gatt_char(
                self._write_characteristic,
                data,
                response=True,  # Wait for write confirmation
            )
        except BleakError as e:
            raise BLEWriteError(f"Write failed: {e}") from e

    @property
    def is_connected(self) -> bool:
        """Check if currently connected to device."""
        return self._client is not None and self._client.is_connected
