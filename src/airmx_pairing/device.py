"""Main AIRMX pairing device class."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from .models.device import AIRMX_PRO, DeviceProfile
from .pairing import PairingSession
from .protocol import PACKET_INTERVAL, PAIRING_TIMEOUT
from .transport import BLEConnection

if TYPE_CHECKING:
    from bleak.backends.device import BLEDevice

    from .key_exchange import KeyExchangeClient
    from .models.enums import PairingPhase
    from .models.pairing import PairingResult
    from .models.wifi import WifiCredentials

_LOGGER = logging.getLogger(__name__)


class AirmxDevice:
    """AIRMX air purifier reachable over BLE.

    Main API for handing Wi-Fi credentials to a purifier and retrieving its
    device key.

    Usage:
        device = AirmxDevice()  # First "AIRMX Pro" found by scanning
        result = await device.pair(WifiCredentials("Home", "password1"))
        if result.success:
            async with KeyExchangeClient(endpoint) as client:
                key = await device.fetch_device_key(client)
    """

    def __init__(
            self,
            address: str | None = None,
            ble_device: BLEDevice | None = None,
            profile: DeviceProfile = AIRMX_PRO,
            timeout: float = 10.0,
            pairing_timeout: float = PAIRING_TIMEOUT,
            packet_interval: float = PACKET_INTERVAL,
            on_phase_change: Callable[[PairingPhase], None] | None = None,
    ):
        """Initialize AIRMX device.

        Args:
            address: Optional MAC address (scan by name if omitted)
            ble_device: Optional BLEDevice from an earlier scan
            profile: Device name and GATT layout (default: AIRMX Pro)
            timeout: BLE connection timeout in seconds (default: 10)
            pairing_timeout: Deadline for the pairing exchange in seconds (default: 30)
            packet_interval: Delay after each packet write in seconds (default: 0.5)
            on_phase_change: Optional callback invoked with every new pairing phase
        """
        self.address = address
        self._connection = BLEConnection(
            profile=profile,
            ble_device=ble_device,
            address=address,
            timeout=timeout,
        )
        self._session = PairingSession(
            self._connection,
            timeout=pairing_timeout,
            packet_interval=packet_interval,
            on_phase_change=on_phase_change,
        )

    @property
    def session(self) -> PairingSession:
        """Pairing state machine of this device."""
        return self._session

    @property
    def device_id(self) -> int | None:
        """Identifier reported by the last successful pairing."""
        result = self._session.result
        if result is None or not result.success:
            return None
        return result.device_id

    async def pair(self, credentials: WifiCredentials) -> PairingResult:
        """Hand Wi-Fi credentials to the purifier and read its identifier."""
        _LOGGER.info("Pairing %s with network %r", self.address or "AIRMX device", credentials.ssid)
        return await self._session.pair(credentials)

    async def retry(self) -> PairingResult:
        """Repeat the last pairing attempt from the start."""
        return await self._session.retry()

    async def fetch_device_key(self, client: KeyExchangeClient) -> str:
        """Look up the key of the paired device.

        Raises:
            RuntimeError: If the device has not reported an identifier
            KeyLookupError: If the lookup fails
        """
        device_id = self.device_id
        if device_id is None:
            raise RuntimeError("Device not paired - identifier unknown")

        return await client.fetch_key(device_id)
