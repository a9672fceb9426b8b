"""Maps exceptions escaping a route to the JSON error envelope."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from src.commons.telemetry.logger import get_logger
from src.domain.exceptions import (
    DomainException,
    PipelineRunError,
    VideoNotFoundException,
)

logger = get_logger(__name__)


class APIError(Exception):
    """Error raised by a route with an explicit client-facing code."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


@dataclass(frozen=True)
class _ErrorMapping:
    code: str
    status_code: int
    log_level: int = logging.WARNING
    details: Callable[[Any], dict[str, Any]] = lambda _exc: {}


# Most specific first; the first isinstance match wins
_DOMAIN_ERRORS: tuple[tuple[type[DomainException], _ErrorMapping], ...] = (
    (
        VideoNotFoundException,
        _ErrorMapping(
            "VIDEO_NOT_FOUND",
            status.HTTP_404_NOT_FOUND,
            details=lambda exc: {"video_id": exc.video_id},
        ),
    ),
    (
        PipelineRunError,
        _ErrorMapping(
            "PROCESSING_ERROR",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            log_level=logging.ERROR,
            details=lambda exc: {"video_id": exc.video_id, "stage": exc.stage},
        ),
    ),
    (DomainException, _ErrorMapping("DOMAIN_ERROR", status.HTTP_400_BAD_REQUEST)),
)


def error_response(
    request: Request,
    code: str,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build the error envelope, tagged with the request's correlation id."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
                "request_id": getattr(request.state, "request_id", "unknown"),
            }
        },
    )


def handle_exception(request: Request, exc: Exception) -> JSONResponse:
    """Translate an exception into an error response.

    ``APIError`` keeps its own code and status. Domain errors go through
    ``_DOMAIN_ERRORS``. Anything else is logged with its traceback and
    answered with an opaque 500.
    """
    if isinstance(exc, APIError):
        logger.warning(
            "API error",
            extra={"error_code": exc.code, "details": exc.details},
        )
        return error_response(
            request, exc.code, exc.message, exc.status_code, exc.details
        )

    for exc_type, mapping in _DOMAIN_ERRORS:
        if isinstance(exc, exc_type):
            details = mapping.details(exc)
            logger.log(
                mapping.log_level,
                str(exc),
                extra={"error_code": mapping.code, **details},
            )
            return error_response(
                request, mapping.code, str(exc), mapping.status_code, details
            )

    logger.exception("Unhandled error", extra={"path": request.url.path})
    return error_response(
        request,
        "INTERNAL_ERROR",
        "An unexpected error occurred",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def error_handler_middleware(
    request: Request,
    call_next: RequestResponseEndpoint,
) -> Response:
    """Catch exceptions from downstream handlers and format them."""
    try:
        return await call_next(request)
    except Exception as exc:
        return handle_exception(request, exc)
