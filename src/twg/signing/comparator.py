"""Constant-time byte comparison."""

from __future__ import annotations

import hmac as hmac_mod

__all__ = ["constant_time_equals"]

_BYTES_LIKE = (bytes, bytearray)


def constant_time_equals(left: object, right: object) -> bool:
    """Compare two byte strings without leaking where they differ.

    A length mismatch returns early; that reveals only the length, which for
    an HMAC digest is public anyway. Equal-length inputs go through
    ``hmac.compare_digest`` whose running time depends on length alone.
    Never raises.
    """
    if not isinstance(left, _BYTES_LIKE) or not isinstance(right, _BYTES_LIKE):
        return False
    if len(left) != len(right):
        return False
    return hmac_mod.compare_digest(left, right)
