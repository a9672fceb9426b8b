"""Request logging middleware."""

import time
from collections.abc import Callable
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.commons.telemetry.logger import get_logger, set_correlation_id

logger = get_logger(__name__)

# Probes are polled constantly and would drown the request log
_QUIET_PATHS = frozenset({"/health/live", "/health/ready"})


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each HTTP request and tags it with a correlation id.

    The id comes from ``X-Request-ID`` when the caller sends one. It is stored
    on ``request.state`` for error responses, bound to the logging context so
    every log line of the request carries it, and echoed in the response.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Any],
    ) -> Response:
        request_id = set_correlation_id(request.headers.get("X-Request-ID"))
        request.state.request_id = request_id
        quiet = request.url.path in _QUIET_PATHS

        start_time = time.perf_counter()
        if not quiet:
            logger.info(
                "Request started",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "client_ip": request.client.host if request.client else "unknown",
                },
            )

        response: Response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        if not quiet:
            logger.info(
                "Request completed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                },
            )

        response.headers["X-Request-ID"] = request_id
        return response
