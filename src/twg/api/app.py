"""FastAPI application factory."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse

from twg.api.routes import health, webhook_teams
from twg.handlers import AcknowledgementHandler
from twg.logging import configure_logging, correlation_id_var, new_correlation_id
from twg.settings import Settings
from twg.signing.keys import SecretKeyError
from twg.signing.verifier import SignatureVerifier

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from twg.handlers import ActivityHandlerProtocol

__all__ = ["create_app"]

logger = logging.getLogger(__name__)

_ERROR_CODE_BY_STATUS: dict[int, str] = {
    401: "SIGNATURE_INVALID",
    413: "PAYLOAD_TOO_LARGE",
    503: "SERVICE_UNAVAILABLE",
}


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Inject correlation_id and record request metrics."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        cid = request.headers.get("x-correlation-id") or new_correlation_id()
        correlation_id_var.set(cid)
        request.state.request_id = cid

        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start

        response.headers["x-correlation-id"] = cid
        response.headers["x-request-duration-ms"] = f"{duration * 1000:.1f}"

        health.record_request(response.status_code)

        return response


def _resolve_request_id(request: Request) -> str:
    state_request_id = getattr(request.state, "request_id", "")
    if state_request_id:
        return state_request_id
    header_request_id = request.headers.get("x-correlation-id", "")
    if header_request_id:
        request.state.request_id = header_request_id
        return header_request_id
    generated = new_correlation_id()
    request.state.request_id = generated
    return generated


def _error_payload(error_code: str, message: str, request_id: str, *, details: Any = None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "error_code": error_code,
        "message": message,
        "request_id": request_id,
    }
    if details is not None:
        payload["details"] = details
    return payload


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    request_id = _resolve_request_id(request)
    status_code = exc.status_code

    if status_code in _ERROR_CODE_BY_STATUS:
        error_code = _ERROR_CODE_BY_STATUS[status_code]
    elif 400 <= status_code < 500:
        error_code = "INVALID_REQUEST"
    else:
        error_code = "INTERNAL_ERROR"

    message = exc.detail if isinstance(exc.detail, str) else "Request failed"

    return JSONResponse(
        status_code=status_code,
        content=_error_payload(error_code, message, request_id),
        headers=getattr(exc, "headers", None),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    request_id = _resolve_request_id(request)
    return JSONResponse(
        status_code=422,
        content=_error_payload(
            "INVALID_REQUEST",
            "Request validation failed",
            request_id,
            details=exc.errors(),
        ),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = _resolve_request_id(request)
    logger.exception("Unhandled application exception", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=_error_payload("INTERNAL_ERROR", "Internal server error", request_id),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Startup: a missing or undecodable secret aborts here (SecretKeyError)
    settings: Settings = getattr(app.state, "settings", None) or Settings()
    configure_logging(json_output=settings.log_json, level=settings.log_level)

    try:
        verifier = SignatureVerifier.from_settings(settings)
    except SecretKeyError:
        logger.critical("Cannot start: TWG_SHARED_SECRET missing or invalid")
        raise

    app.state.settings = settings
    app.state.verifier = verifier
    logger.info(
        "Teams webhook gateway ready (secret encoding %s, evaluate_all=%s)",
        settings.secret_encoding,
        verifier.evaluate_all,
    )

    yield

    # Shutdown
    app.state.verifier = None


def create_app(
    settings: Settings | None = None,
    *,
    activity_handler: ActivityHandlerProtocol | None = None,
) -> FastAPI:
    app = FastAPI(
        title="Teams Webhook Gateway",
        version="0.1.0",
        description="Verifies HMAC-signed Teams outgoing-webhook calls before handling them.",
        lifespan=lifespan,
    )
    if settings is not None:
        app.state.settings = settings
    app.state.verifier = None
    app.state.activity_handler = activity_handler or AcknowledgementHandler()

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_exception_handler)
    app.add_middleware(ObservabilityMiddleware)
    app.include_router(health.router, tags=["health"])
    app.include_router(webhook_teams.router, tags=["webhook"])
    return app


app = create_app()
