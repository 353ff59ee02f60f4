"""Pair an AIRMX purifier with a Wi-Fi network and print its identifier.

Usage:
    uv run python examples/pair_device.py --ssid Home --password password1
    uv run python examples/pair_device.py --ssid Home --password password1 \
        --address AA:BB:CC:DD:EE:FF --key-endpoint https://example.invalid/exchange
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime

from airmx_pairing import (
    AirmxDevice,
    KeyExchangeClient,
    KeyLookupError,
    PairingPhase,
    WifiCredentials,
    discover_devices,
)


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


def _print_phase(phase: PairingPhase) -> None:
    print(f"[{_timestamp()}] phase={phase.value}")


async def scan(duration: float) -> None:
    """List purifiers in range."""
    print(f"Scanning for AIRMX purifiers ({duration:.1f}s)...")
    devices = await discover_devices(timeout=duration)
    if not devices:
        print("No devices found")
    for address, name in sorted(devices.items()):
        print(f"  {address}: {name}")


async def pair(args: argparse.Namespace) -> int:
    """Pair once, offering retries on failure."""
    try:
        credentials = WifiCredentials(ssid=args.ssid, password=args.password)
    except ValueError as err:
        print(f"Invalid credentials: {err}")
        return 2

    device = AirmxDevice(
        address=args.address,
        pairing_timeout=args.timeout,
        on_phase_change=_print_phase,
    )

    result = await device.pair(credentials)
    attempts = 1
    while not result.success and attempts <= args.retries:
        print(f"[{_timestamp()}] attempt {attempts} failed: {result.error}")
        attempts += 1
        result = await device.retry()

    if not result.success:
        print(f"Pairing failed: {result.error}")
        return 1

    if result.device_id is None:
        print("Paired, but the device reported no identifier")
        return 0

    print(f"Paired device id={result.device_id}")

    if args.key_endpoint:
        async with KeyExchangeClient(args.key_endpoint) as client:
            try:
                key = await device.fetch_device_key(client)
            except KeyLookupError as err:
                print(f"Key lookup failed: {err}")
                return 1
        print(f"Device key={key}")

    return 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Hand Wi-Fi credentials to an AIRMX purifier over BLE."
    )
    parser.add_argument("--ssid", help="Wi-Fi network name")
    parser.add_argument("--password", help="Wi-Fi password (8-63 characters)")
    parser.add_argument(
        "--address",
        help="Purifier MAC address (default: first 'AIRMX Pro' found)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Pairing deadline in seconds. Default: 30",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=0,
        help="Retry attempts after a failed pairing. Default: 0",
    )
    parser.add_argument(
        "--key-endpoint",
        help="Key exchange URL; if set, the device key is looked up after pairing",
    )
    parser.add_argument(
        "--scan",
        type=float,
        metavar="SECONDS",
        help="Only list purifiers in range for the given duration.",
    )
    parser.add_argument("--debug", action="store_true", help="Log packet traffic.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    if args.scan:
        asyncio.run(scan(args.scan))
        return

    if not args.ssid or args.password is None:
        raise SystemExit("--ssid and --password are required")

    try:
        raise SystemExit(asyncio.run(pair(args)))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
