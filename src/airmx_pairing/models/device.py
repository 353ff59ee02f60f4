"""BLE device profiles."""

from __future__ import annotations

from dataclasses import dataclass

from ..protocol.commands import (
    DEVICE_NAME,
    NOTIFY_CHARACTERISTIC_UUID,
    SERVICE_UUID,
    WRITE_CHARACTERISTIC_UUID,
)


@dataclass(frozen=True)
class DeviceProfile:
    """Advertised name and GATT layout of a purifier model."""

    name: str
    service_uuid: str
    write_characteristic_uuid: str
    notify_characteristic_uuid: str


AIRMX_PRO = DeviceProfile(
    name=DEVICE_NAME,
    service_uuid=SERVICE_UUID,
    write_characteristic_uuid=WRITE_CHARACTERISTIC_UUID,
    notify_characteristic_uuid=NOTIFY_CHARACTERISTIC_UUID,
)
