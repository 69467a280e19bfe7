"""Shared-secret decoding into HMAC key bytes."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from enum import StrEnum

__all__ = [
    "KeyEncoding",
    "SecretKey",
    "SecretKeyError",
    "MissingSecretError",
    "InvalidSecretError",
    "decode_secret",
]


class KeyEncoding(StrEnum):
    """How the configured secret string maps to key bytes."""

    BASE64 = "base64"  # Teams hands out the secret base64-encoded
    UTF8 = "utf8"


class SecretKeyError(Exception):
    """The configured secret cannot produce a usable key. Fatal at startup."""


class MissingSecretError(SecretKeyError):
    pass


class InvalidSecretError(SecretKeyError):
    pass


@dataclass(frozen=True)
class SecretKey:
    """Immutable HMAC key. The raw bytes never appear in repr or logs."""

    raw: bytes = field(repr=False)
    encoding: KeyEncoding = KeyEncoding.BASE64

    def __len__(self) -> int:
        return len(self.raw)


def decode_secret(secret: str, encoding: KeyEncoding | str = KeyEncoding.BASE64) -> SecretKey:
    """Turn the configured secret into key bytes.

    Args:
        secret: The secret string from configuration.
        encoding: ``base64`` decodes the string strictly; ``utf8`` uses its
            UTF-8 bytes as-is.

    Raises:
        MissingSecretError: The secret is empty or whitespace only.
        InvalidSecretError: Base64 mode and the secret does not decode to
            at least one byte.
    """
    if not secret or not secret.strip():
        msg = "No shared secret configured"
        raise MissingSecretError(msg)

    mode = KeyEncoding(encoding)
    if mode is KeyEncoding.UTF8:
        return SecretKey(raw=secret.encode("utf-8"), encoding=mode)

    try:
        raw = base64.b64decode(secret.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        msg = "Shared secret is not valid base64"
        raise InvalidSecretError(msg) from exc
    if not raw:
        msg = "Shared secret decodes to an empty key"
        raise InvalidSecretError(msg)
    return SecretKey(raw=raw, encoding=mode)
