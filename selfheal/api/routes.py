"""HTTP routes: webhook ingress, liveness, metrics and diagnostics."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import ValidationError

from selfheal.api.schemas import ErrorResponse, StatusResponse, WebhookPayload
from selfheal.engine.processor import AlertDisposition
from selfheal.observability.metrics import webhook_requests_total

_log = structlog.get_logger(component="api.routes")

router = APIRouter()


class _BodyTooLarge(Exception):
    pass


async def _read_body(request: Request, limit: int) -> bytes:
    """Read the request body, refusing anything larger than *limit* bytes."""
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise _BodyTooLarge
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise _BodyTooLarge
    return bytes(body)


def _error(status_code: int, error: str, detail: str) -> JSONResponse:
    webhook_requests_total.labels(code=str(status_code)).inc()
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(),
    )


@router.post("/webhook", response_model=None)
async def receive_webhook(request: Request) -> Response:
    """Process an Alertmanager batch and acknowledge it.

    The reply is ``200 OK`` once every alert has been attempted, whatever the
    individual outcomes were; those are reported through logs and metrics.
    """
    limit: int = request.app.state.max_body_bytes
    try:
        raw = await _read_body(request, limit)
    except _BodyTooLarge:
        _log.warning("webhook_payload_too_large", limit=limit)
        return _error(413, "PAYLOAD_TOO_LARGE", f"Request body exceeds {limit} bytes.")

    try:
        payload = WebhookPayload.model_validate_json(raw)
    except ValidationError as exc:
        _log.warning("webhook_payload_invalid", error_count=exc.error_count(), error=str(exc)[:300])
        return _error(400, "INVALID_PAYLOAD", "Body is not a valid Alertmanager webhook payload.")

    batch = payload.to_batch()
    _log.info("webhook_received", alerts=len(batch))

    results = await request.app.state.processor.process_batch(batch)

    summary: dict[str, int] = {}
    for result in results:
        summary[result.disposition.value] = summary.get(result.disposition.value, 0) + 1
    _log.info(
        "webhook_processed",
        alerts=len(results),
        succeeded=summary.get(AlertDisposition.SUCCEEDED.value, 0),
        failed=summary.get(AlertDisposition.FAILED.value, 0),
        suppressed=summary.get(AlertDisposition.COOLDOWN.value, 0),
    )
    webhook_requests_total.labels(code="200").inc()
    return PlainTextResponse("OK")


@router.get("/health", response_class=PlainTextResponse)
async def health() -> str:
    """Liveness probe. The engine has no unhealthy state to report."""
    return "healthy"


@router.get("/metrics")
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/status", response_model=StatusResponse)
async def status(request: Request) -> StatusResponse:
    from selfheal import __version__

    state = request.app.state
    return StatusResponse(
        version=__version__,
        cooldown_window_seconds=state.cooldown.window_seconds,
        cooldowns_active=state.cooldown.active_count(),
        counters=state.counters.snapshot(),
    )
