"""Device response parsing."""

from __future__ import annotations

import struct

IDENTITY_LENGTH = 4


def parse_identity_response(payload: bytes) -> int | None:
    """Parse the RequestIdentity reply.

    Format: [length:1][device_id:4 BE]

    Args:
        payload: Reassembled reply payload

    Returns:
        Device identifier, or None if the device reported no 4-byte identifier
    """
    if not payload:
        return None

    declared_length = payload[0]
    if declared_length != IDENTITY_LENGTH or len(payload) < 1 + IDENTITY_LENGTH:
        return None

    return struct.unpack(">I", payload[1:1 + IDENTITY_LENGTH])[0]
