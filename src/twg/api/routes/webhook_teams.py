"""Teams outgoing-webhook endpoint: HMAC-verified message callbacks."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Header, HTTPException, Request
from starlette.responses import JSONResponse

from twg.api.routes import health
from twg.signing.models import RawRequest

if TYPE_CHECKING:
    from twg.handlers import ActivityHandlerProtocol
    from twg.signing.verifier import SignatureVerifier

__all__ = ["router", "parse_activity"]

logger = logging.getLogger(__name__)
router = APIRouter()

DEFAULT_MAX_BODY_BYTES = 4 * 1024 * 1024
SIGNATURE_VARIANT_HEADER = "x-signature-variant"


def parse_activity(body: bytes) -> dict[str, Any]:
    """Decode a trusted body. Non-JSON bodies become ``{"text": <body>}``."""
    text = body.decode("utf-8", errors="replace")
    try:
        payload = json.loads(text)
    except ValueError:
        return {"text": text}
    if not isinstance(payload, dict):
        return {"text": text}
    return payload


def _max_body_bytes(request: Request) -> int:
    settings = getattr(request.app.state, "settings", None)
    return getattr(settings, "max_body_bytes", DEFAULT_MAX_BODY_BYTES)


@router.post(
    "/teams",
    summary="Receive Teams outgoing-webhook messages",
    operation_id="teams_webhook",
)
async def teams_webhook(
    request: Request,
    authorization: str | None = Header(default=None),
) -> JSONResponse:
    """Handle a Teams outgoing-webhook call.

    Flow:
    1. Capture the exact body bytes (no decoding before verification)
    2. Verify the ``Authorization: HMAC <base64>`` signature (fail-closed)
    3. Parse the now-trusted body and hand it to the activity handler
    """
    verifier: SignatureVerifier | None = getattr(request.app.state, "verifier", None)
    if verifier is None:
        logger.error("Shared secret not configured, rejecting webhook (fail-closed)")
        raise HTTPException(status_code=503, detail="Webhook signature verification not configured")

    # ── 1. Raw body ────────────────────────────────────────
    limit = _max_body_bytes(request)
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise HTTPException(status_code=413, detail="Request body too large")
    body = await request.body()
    if len(body) > limit:
        raise HTTPException(status_code=413, detail="Request body too large")

    # ── 2. Signature verification ──────────────────────────
    outcome = verifier.verify(RawRequest(body=body, signature_header=authorization))
    health.record_verification(outcome)
    if not outcome.matched:
        logger.warning("Invalid HMAC signature (no variant matched), body length %d", len(body))
        raise HTTPException(status_code=401, detail="Invalid HMAC signature")

    logger.info("Valid HMAC signature, matched variant %s", outcome.label)

    # ── 3. Hand off ────────────────────────────────────────
    handler: ActivityHandlerProtocol = request.app.state.activity_handler
    reply = await handler.handle(parse_activity(body))

    return JSONResponse(
        status_code=200,
        content=reply,
        headers={SIGNATURE_VARIANT_HEADER: str(outcome.label)},
    )
