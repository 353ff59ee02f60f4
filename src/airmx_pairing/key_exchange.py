"""Device key lookup.

After pairing, the purifier's identifier is exchanged for the key used by the
cloud and local control APIs. The exchange service answers a GET request with
a JSON object carrying a ``key`` field.
"""

from __future__ import annotations

import json
import logging

import aiohttp

from .exceptions import KeyLookupError

_LOGGER = logging.getLogger(__name__)


class KeyExchangeClient:
    """Looks up device keys by device identifier.

    Usage:
        async with KeyExchangeClient(endpoint) as client:
            key = await client.fetch_key(device_id)
    """

    def __init__(
            self,
            endpoint: str,
            session: aiohttp.ClientSession | None = None,
            api_timeout: float = 8,
    ):
        """Initialize key exchange client.

        Args:
            endpoint: URL of the key exchange service
            session: Optional shared aiohttp session (left open on close)
            api_timeout: Request timeout in seconds (default: 8)
        """
        self.endpoint = endpoint
        self.api_timeout = api_timeout
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> KeyExchangeClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the aiohttp session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            _LOGGER.debug("Closing aiohttp ClientSession")
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if not self._session or self._session.closed:
            _LOGGER.debug("Creating new aiohttp ClientSession")
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def fetch_key(self, device_id: int) -> str:
        """Fetch the key of a paired device.

        Args:
            device_id: Identifier reported by the purifier during pairing

        Returns:
            The device key

        Raises:
            KeyLookupError: On network errors, non-success status or a reply without a key
        """
        session = self._get_session()

        _LOGGER.debug("Looking up key for device %d", device_id)
        try:
            async with session.get(
                self.endpoint,
                params={"device": str(device_id)},
                timeout=aiohttp.ClientTimeout(total=self.api_timeout),
            ) as response:
                if not response.ok:
                    raise KeyLookupError(
                        f"Key exchange for device {device_id} failed with status {response.status}"
                    )
                body: object = await response.json()
        except (aiohttp.ClientError, json.JSONDecodeError) as e:
            raise KeyLookupError(f"Key exchange for device {device_id} failed: {e}") from e

        if not isinstance(body, dict):
            raise KeyLookupError("Invalid key exchange response: expected JSON object")

        key = body.get("key")
        if not isinstance(key, str) or not key:
            raise KeyLookupError(f"Key exchange response for device {device_id} has no key")

        _LOGGER.info("Retrieved key for device %d", device_id)
        return key
