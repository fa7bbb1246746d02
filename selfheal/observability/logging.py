"""Structured logging configuration using structlog.

Every engine log line is a single JSON object on stderr carrying ``ts``,
``level``, ``service``, ``component`` and the event name. Libraries that log
through the standard library (uvicorn, kubernetes-asyncio, aiohttp) are
routed to stderr with the same level so nothing is silently dropped when
uvicorn's own log config is disabled.
"""

from __future__ import annotations

import logging
import sys

import structlog

_SERVICE = "selfheal"

# Chatty third-party loggers are held at WARNING unless debugging.
_LIBRARY_LOGGERS = ("uvicorn", "uvicorn.error", "kubernetes_asyncio", "aiohttp")


def _add_service(_logger: object, _method: str, event_dict: dict[str, object]) -> dict[str, object]:
    event_dict.setdefault("service", _SERVICE)
    return event_dict


def setup_logging(level: str = "info") -> None:
    """Configure structlog JSON output and the stdlib loggers underneath it."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(format="%(levelname)s %(name)s %(message)s", stream=sys.stderr, level=log_level)
    library_level = log_level if log_level <= logging.DEBUG else logging.WARNING
    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            _add_service,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]
