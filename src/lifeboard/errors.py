"""API error type rendered as the error envelope.

Learn: Services and dependencies raise ApiError instead of FastAPI's
HTTPException so every failure carries a machine-readable code
(FETCH_FAILED, UNAUTHORIZED, ...) alongside the HTTP status. The
exception handler in main.py turns it into the uniform envelope.
Anything else that escapes becomes INTERNAL_ERROR via
internal_error_response().
"""

import traceback
from typing import Any, Optional

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse

from lifeboard.config import settings
from lifeboard.schemas.envelope import error_response

logger = structlog.get_logger()


class ApiError(Exception):
    """An expected failure with a stable error code."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        self.headers = headers


def unauthorized(message: str) -> ApiError:
    return ApiError(
        "UNAUTHORIZED",
        message,
        status_code=401,
        headers={"WWW-Authenticate": "Bearer"},
    )


def internal_error_response(
    request: Request,
    exc: Exception,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Last resort: log with stack, answer generically.

    The trace goes into `details` only outside production.
    """
    logger.error(
        "request.unhandled_error",
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    details = None
    if not settings.is_production:
        details = "".join(traceback.format_exception(exc))

    return error_response(
        request,
        "INTERNAL_ERROR",
        "An unexpected error occurred",
        status_code=500,
        details=details,
        headers=headers,
    )
