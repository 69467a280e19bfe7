"""HMAC-SHA256 signing and ``Authorization: HMAC`` header handling."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac as hmac_mod
import re
from typing import TYPE_CHECKING

from twg.signing.errors import MalformedSignatureEncoding, MissingSignatureHeader
from twg.signing.models import SignatureClaim

if TYPE_CHECKING:
    from twg.signing.keys import SecretKey

__all__ = [
    "DIGEST_SIZE",
    "compute_digest",
    "sign_body",
    "authorization_header",
    "parse_signature_header",
]

DIGEST_SIZE = hashlib.sha256().digest_size

_HEADER_RE = re.compile(r"^HMAC +(?P<value>[^ ].*?) *\Z", re.IGNORECASE)


def compute_digest(key: SecretKey, body: bytes) -> bytes:
    """Raw HMAC-SHA256 digest of ``body``."""
    return hmac_mod.new(key.raw, body, hashlib.sha256).digest()


def sign_body(key: SecretKey, body: bytes) -> str:
    """Base64 HMAC-SHA256 of ``body``, as Teams puts it in the header."""
    return base64.b64encode(compute_digest(key, body)).decode("ascii")


def authorization_header(key: SecretKey, body: bytes) -> str:
    return f"HMAC {sign_body(key, body)}"


def parse_signature_header(value: str | None) -> SignatureClaim:
    """Extract the claimed digest from an ``Authorization`` header value.

    Raises:
        MissingSignatureHeader: absent, empty, or not ``HMAC <value>``.
        MalformedSignatureEncoding: the value is not strict base64.
    """
    if not value or not isinstance(value, str):
        msg = "Authorization header missing"
        raise MissingSignatureHeader(msg)

    match = _HEADER_RE.match(value)
    if match is None:
        msg = "Authorization header is not an HMAC signature"
        raise MissingSignatureHeader(msg)

    try:
        digest = base64.b64decode(match.group("value"), validate=True)
    except (binascii.Error, ValueError) as exc:
        msg = "HMAC signature is not valid base64"
        raise MalformedSignatureEncoding(msg) from exc
    if not digest:
        msg = "HMAC signature decodes to nothing"
        raise MalformedSignatureEncoding(msg)
    return SignatureClaim(digest=digest)
