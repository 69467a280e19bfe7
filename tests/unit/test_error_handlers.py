"""Tests for global API error handlers."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from twg.api.app import create_app
from twg.signing.verifier import SignatureVerifier


@pytest.mark.anyio()
async def test_unauthenticated_uses_signature_invalid_code(verifier: SignatureVerifier) -> None:
    app = create_app()
    app.state.verifier = verifier
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.post("/teams", content=b'{"text":"hello"}')

    assert resp.status_code == 401
    body = resp.json()
    assert body["error_code"] == "SIGNATURE_INVALID"
    assert body["message"] == "Invalid HMAC signature"
    assert body["request_id"]
    assert resp.headers["x-correlation-id"] == body["request_id"]


@pytest.mark.anyio()
async def test_correlation_id_echoed(verifier: SignatureVerifier) -> None:
    app = create_app()
    app.state.verifier = verifier
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.post(
            "/teams", content=b"{}", headers={"x-correlation-id": "cid-123"}
        )

    assert resp.headers["x-correlation-id"] == "cid-123"
    assert resp.json()["request_id"] == "cid-123"
    assert "x-request-duration-ms" in resp.headers


@pytest.mark.anyio()
async def test_not_found_uses_invalid_request_error_code() -> None:
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.get("/does-not-exist")

    assert resp.status_code == 404
    body = resp.json()
    assert body["error_code"] == "INVALID_REQUEST"
    assert body["request_id"]


@pytest.mark.anyio()
async def test_method_not_allowed_is_invalid_request() -> None:
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.get("/teams")

    assert resp.status_code == 405
    assert resp.json()["error_code"] == "INVALID_REQUEST"


@pytest.mark.anyio()
async def test_unconfigured_verifier_is_service_unavailable() -> None:
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.post("/teams", content=b"{}", headers={"authorization": "HMAC AQID"})

    assert resp.status_code == 503
    assert resp.json()["error_code"] == "SERVICE_UNAVAILABLE"


@pytest.mark.anyio()
async def test_unhandled_exception_returns_internal_error_payload() -> None:
    app = create_app()

    @app.get("/__boom")
    async def boom() -> dict[str, str]:
        raise RuntimeError("boom")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/__boom")

    assert resp.status_code == 500
    body = resp.json()
    assert body["error_code"] == "INTERNAL_ERROR"
    assert body["message"] == "Internal server error"
    assert body["request_id"]
