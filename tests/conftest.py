"""Shared fixtures for unit and integration tests."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest

from twg.api.routes import health
from twg.settings import Settings
from twg.signing.keys import KeyEncoding, SecretKey, decode_secret
from twg.signing.verifier import SignatureVerifier

SHARED_SECRET = "c2VjcmV0"  # base64("secret")


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def shared_secret() -> str:
    return SHARED_SECRET


@pytest.fixture()
def secret_key(shared_secret: str) -> SecretKey:
    return decode_secret(shared_secret, KeyEncoding.BASE64)


@pytest.fixture()
def verifier(secret_key: SecretKey) -> SignatureVerifier:
    return SignatureVerifier(secret_key)


@pytest.fixture()
def test_settings(shared_secret: str) -> Settings:
    return Settings(
        shared_secret=shared_secret,
        secret_encoding=KeyEncoding.BASE64,
        log_json=False,
        _env_file=None,  # type: ignore[call-arg]
    )


@pytest.fixture()
def sample_activity() -> dict[str, Any]:
    """Teams outgoing-webhook message activity."""
    return {
        "type": "message",
        "id": "1485983408511",
        "timestamp": "2026-10-18T09:30:08.511Z",
        "localTimestamp": "2026-10-18T11:30:08.511+02:00",
        "serviceUrl": "https://smba.trafficmanager.net/emea/",
        "channelId": "msteams",
        "from": {"id": "29:1abc", "name": "Alice Example", "aadObjectId": "a1b2"},
        "conversation": {"isGroup": True, "id": "19:abc@thread.skype;messageid=1485983408511"},
        "text": "<at>Gateway</at> hi&nbsp;there",
        "textFormat": "plain",
        "entities": [{"type": "mention", "text": "<at>Gateway</at>"}],
    }


@pytest.fixture(autouse=True)
def _fresh_metrics() -> Iterator[None]:
    health.reset_metrics()
    yield
    health.reset_metrics()
