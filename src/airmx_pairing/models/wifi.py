"""Wi-Fi credentials handed to the purifier during pairing."""

from __future__ import annotations

from dataclasses import dataclass

MAX_SSID_LENGTH = 32
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 63


@dataclass(frozen=True, slots=True)
class WifiCredentials:
    """Validated SSID and WPA passphrase.

    Lengths are measured in UTF-8 bytes, as sent over the air.
    """

    ssid: str
    password: str

    def __post_init__(self) -> None:
        ssid_length = len(self.ssid.encode("utf-8"))
        if not 1 <= ssid_length <= MAX_SSID_LENGTH:
            raise ValueError(
                f"SSID length out of range: {ssid_length} bytes (must be 1-{MAX_SSID_LENGTH})"
            )

        password_length = len(self.password.encode("utf-8"))
        if not MIN_PASSWORD_LENGTH <= password_length <= MAX_PASSWORD_LENGTH:
            raise ValueError(
                f"Password length out of range: {password_length} bytes "
                f"(must be {MIN_PASSWORD_LENGTH}-{MAX_PASSWORD_LENGTH})"
            )

    def __repr__(self) -> str:
        return f"WifiCredentials(ssid={self.ssid!r}, password='***')"
