"""FastAPI application factory.

Usage::

    from selfheal.api.app import create_app

    app = create_app(
        processor=processor,
        cooldown=cooldown,
        counters=counters,
        config=config,
    )

The factory is used by both the production bootstrap (``selfheal.app``)
and unit tests.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from selfheal.api.routes import router
from selfheal.api.schemas import ErrorResponse
from selfheal.engine.cooldown import CooldownGuard
from selfheal.engine.counters import RecoveryCounters
from selfheal.engine.processor import AlertProcessor
from selfheal.models.config import SelfHealConfig

_log = structlog.get_logger(component="api.app")

_ERROR_CODES = {
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def create_app(
    processor: AlertProcessor,
    cooldown: CooldownGuard,
    counters: RecoveryCounters,
    config: SelfHealConfig | None = None,
) -> FastAPI:
    """Create and configure the webhook FastAPI application.

    Args:
        processor: AlertProcessor that handles each decoded batch.
        cooldown:  CooldownGuard shared with the processor (read for /status).
        counters:  RecoveryCounters shared with the processor (read for /status).
        config:    SelfHealConfig; only ``api.max_body_bytes`` is read here.

    Returns:
        Configured FastAPI application, ready to be served by uvicorn.
    """
    from selfheal import __version__

    config = config or SelfHealConfig()

    app = FastAPI(
        title="selfheal",
        summary="Alertmanager webhook that applies recovery actions to Kubernetes workloads",
        version=__version__,
        docs_url=None,
        redoc_url=None,
    )

    app.state.processor = processor
    app.state.cooldown = cooldown
    app.state.counters = counters
    app.state.config = config
    app.state.max_body_bytes = config.api.max_body_bytes

    app.include_router(router)

    # -----------------------------------------------------------------------
    # Exception handlers
    # -----------------------------------------------------------------------

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        _request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        """Routing errors (unknown path, wrong method) use the error envelope."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
                detail=str(exc.detail),
            ).model_dump(),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions; stack traces stay in the logs."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                detail="An unexpected error occurred.",
            ).model_dump(),
        )

    return app


