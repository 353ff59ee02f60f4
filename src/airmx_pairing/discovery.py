"""BLE discovery of AIRMX purifiers."""

from __future__ import annotations

import logging

from bleak import BleakScanner

from .protocol import DEVICE_NAME

_LOGGER = logging.getLogger(__name__)


async def discover_devices(timeout: float = 10.0, name: str = DEVICE_NAME) -> dict[str, str]:
    """Scan for purifiers advertising the given name.

    Args:
        timeout: Scan duration in seconds (default: 10)
        name: Advertised device name to match (default: "AIRMX Pro")

    Returns:
        Mapping of device address to advertised name
    """
    _LOGGER.debug("Scanning %.1fs for %r", timeout, name)
    devices = await BleakScanner.discover(timeout=timeout)

    found = {
        device.address: device.name
        for device in devices
        if device.name == name
    }

    _LOGGER.debug("Found %d matching devices", len(found))
    return found
