"""Custom middleware for the API."""

import time
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from sheepit.utils.logging import get_logger

logger = get_logger(__name__)

# Never logged, even at debug level.
SENSITIVE_HEADERS = frozenset({"authorization", "cookie", "x-user-id"})


def loggable_headers(request: Request) -> dict[str, str]:
    """Request headers minus the ones carrying session identity."""
    return {
        k: v for k, v in request.headers.items() if k.lower() not in SENSITIVE_HEADERS
    }


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request and tag downstream log lines with its request ID."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        # Generate request ID
        request_id = request.headers.get("X-Request-ID", str(time.time_ns()))

        # Orchestrator and provider logs for this request carry the same ID
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        # Log request
        logger.info(
            "request.started",
            method=request.method,
            path=request.url.path,
        )
        logger.debug("request.headers", headers=loggable_headers(request))

        # Process request
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        # Calculate duration
        duration_ms = (time.perf_counter() - start_time) * 1000

        # Log response
        logger.info(
            "request.completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
            request_id=request_id,
        )

        # Add timing header
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        response.headers["X-Request-ID"] = request_id

        return response
