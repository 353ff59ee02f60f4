"""Test purifier discovery."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from airmx_pairing import discover_devices


def _advertiser(address: str, name: str | None) -> MagicMock:
    device = MagicMock()
    device.address = address
    device.name = name
    return device


@pytest.mark.asyncio
async def test_discover_filters_by_name() -> None:
    found = [
        _advertiser("AA:BB:CC:DD:EE:01", "AIRMX Pro"),
        _advertiser("AA:BB:CC:DD:EE:02", "Headphones"),
        _advertiser("AA:BB:CC:DD:EE:03", None),
        _advertiser("AA:BB:CC:DD:EE:04", "AIRMX Pro"),
    ]
    with patch(
        "airmx_pairing.discovery.BleakScanner.discover",
        AsyncMock(return_value=found),
    ) as discover:
        devices = await discover_devices(timeout=3.0)

    discover.assert_awaited_once_with(timeout=3.0)
    assert devices == {
        "AA:BB:CC:DD:EE:01": "AIRMX Pro",
        "AA:BB:CC:DD:EE:04": "AIRMX Pro",
    }


@pytest.mark.asyncio
async def test_discover_custom_name() -> None:
    found = [_advertiser("AA:BB:CC:DD:EE:01", "AIRMX Pro")]
    with patch(
        "airmx_pairing.discovery.BleakScanner.discover",
        AsyncMock(return_value=found),
    ):
        assert await discover_devices(name="AIRMX Tank") == {}
