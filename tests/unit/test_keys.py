"""Tests for shared-secret decoding."""

from __future__ import annotations

import pytest

from twg.signing.keys import (
    InvalidSecretError,
    KeyEncoding,
    MissingSecretError,
    SecretKeyError,
    decode_secret,
)


class TestDecodeSecret:
    def test_base64_decodes_to_raw_bytes(self) -> None:
        key = decode_secret("c2VjcmV0", KeyEncoding.BASE64)
        assert key.raw == b"secret"
        assert key.encoding is KeyEncoding.BASE64

    def test_utf8_uses_literal_bytes(self) -> None:
        key = decode_secret("c2VjcmV0", KeyEncoding.UTF8)
        assert key.raw == b"c2VjcmV0"

    def test_encoding_accepts_plain_string(self) -> None:
        assert decode_secret("c2VjcmV0", "utf8").raw == b"c2VjcmV0"

    def test_surrounding_whitespace_ignored_for_base64(self) -> None:
        assert decode_secret("  c2VjcmV0\n", KeyEncoding.BASE64).raw == b"secret"

    @pytest.mark.parametrize("secret", ["", "   "])
    def test_missing_secret_is_fatal(self, secret: str) -> None:
        with pytest.raises(MissingSecretError):
            decode_secret(secret, KeyEncoding.BASE64)

    def test_invalid_base64_is_fatal(self) -> None:
        with pytest.raises(InvalidSecretError):
            decode_secret("not base64!!", KeyEncoding.BASE64)

    def test_errors_share_base_class(self) -> None:
        with pytest.raises(SecretKeyError):
            decode_secret("", KeyEncoding.UTF8)

    def test_unknown_encoding_rejected(self) -> None:
        with pytest.raises(ValueError):
            decode_secret("c2VjcmV0", "hex")


class TestSecretKey:
    def test_repr_hides_key_material(self) -> None:
        key = decode_secret("c2VjcmV0", KeyEncoding.BASE64)
        assert "secret" not in repr(key).replace("SecretKey", "")
        assert "c2VjcmV0" not in repr(key)

    def test_immutable(self) -> None:
        key = decode_secret("c2VjcmV0", KeyEncoding.BASE64)
        with pytest.raises(AttributeError):
            key.raw = b"other"  # type: ignore[misc]

    def test_len_is_key_length(self) -> None:
        assert len(decode_secret("c2VjcmV0", KeyEncoding.BASE64)) == 6
