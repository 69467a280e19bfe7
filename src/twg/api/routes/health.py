"""Banner, health, readiness, and metrics endpoints."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Request, Response
from starlette.responses import JSONResponse, PlainTextResponse

if TYPE_CHECKING:
    from twg.signing.models import VerificationOutcome

router = APIRouter()

__all__ = ["router", "record_request", "record_verification", "reset_metrics"]

# ──────────── In-process metrics counters ────────────
# Zero-dep baseline; counters are per process.
_metrics: dict[str, Any] = {}


def reset_metrics() -> None:
    _metrics.clear()
    _metrics.update(
        {
            "requests_total": 0,
            "requests_by_status": {},
            "verifications_accepted": 0,
            "verifications_rejected": 0,
            "matches_by_variant": {},
            "start_time": time.time(),
        }
    )


reset_metrics()


def record_request(status: int) -> None:
    """Call from middleware to track request counts."""
    _metrics["requests_total"] += 1
    key = str(status)
    _metrics["requests_by_status"][key] = _metrics["requests_by_status"].get(key, 0) + 1


def record_verification(outcome: VerificationOutcome) -> None:
    if not outcome.matched:
        _metrics["verifications_rejected"] += 1
        return
    _metrics["verifications_accepted"] += 1
    variant = str(outcome.label)
    _metrics["matches_by_variant"][variant] = _metrics["matches_by_variant"].get(variant, 0) + 1


# ──────────── Endpoints ────────────


@router.get("/", summary="Service banner", operation_id="root")
async def root() -> PlainTextResponse:
    return PlainTextResponse("Teams webhook gateway is running")


@router.get("/health", summary="Liveness probe", operation_id="health")
async def health() -> dict[str, str]:
    """Liveness: app process is running."""
    return {"status": "ok"}


@router.get("/ready", summary="Readiness probe", operation_id="ready")
async def ready(request: Request) -> JSONResponse:
    """Readiness: a signature verifier has been built from configuration.

    Returns 200 when ready, 503 otherwise.
    """
    has_verifier = getattr(request.app.state, "verifier", None) is not None
    return JSONResponse(
        status_code=200 if has_verifier else 503,
        content={"ready": has_verifier, "checks": {"verifier": has_verifier}},
    )


@router.get("/metrics", summary="Prometheus metrics", operation_id="metrics")
async def metrics() -> Response:
    """Prometheus text exposition format."""
    uptime = time.time() - _metrics["start_time"]

    lines = [
        "# HELP twg_up Gateway is up",
        "# TYPE twg_up gauge",
        "twg_up 1",
        "",
        "# HELP twg_uptime_seconds Seconds since process start",
        "# TYPE twg_uptime_seconds gauge",
        f"twg_uptime_seconds {uptime:.1f}",
        "",
        "# HELP twg_requests_total Total HTTP requests",
        "# TYPE twg_requests_total counter",
        f"twg_requests_total {_metrics['requests_total']}",
        "",
    ]

    # Per-status breakdown
    for status, count in sorted(_metrics["requests_by_status"].items()):
        lines.append(f'twg_requests_total{{status="{status}"}} {count}')

    lines += [
        "",
        "# HELP twg_verifications_total Webhook signature verifications",
        "# TYPE twg_verifications_total counter",
        f'twg_verifications_total{{result="accepted"}} {_metrics["verifications_accepted"]}',
        f'twg_verifications_total{{result="rejected"}} {_metrics["verifications_rejected"]}',
        "",
        "# HELP twg_signature_variant_total Accepted signatures by matched rendering",
        "# TYPE twg_signature_variant_total counter",
    ]
    for variant, count in sorted(_metrics["matches_by_variant"].items()):
        lines.append(f'twg_signature_variant_total{{variant="{variant}"}} {count}')
    lines.append("")

    return Response(content="\n".join(lines), media_type="text/plain; charset=utf-8")
