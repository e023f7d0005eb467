"""Request ID and access logging middleware.

Learn: Outermost layer of the stack. Every request gets an ID, taken
from an incoming X-Request-ID header (so a trace started upstream keeps
its ID) or generated here. The ID is:
- bound to structlog's contextvars, so every log line of the request has it
- stored on request.state, where the envelope picks it up as meta.requestId
- echoed back in the X-Request-ID response header

One line is logged when the request arrives and one when it leaves,
with the status and how long it took.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag the request with an ID and log it in and out."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.info(
            "request.received",
            method=request.method,
            path=request.url.path,
            ip=request.client.host if request.client else None,
        )
        started = time.perf_counter()

        response: Response = await call_next(request)

        logger.info(
            "request.completed",
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        response.headers["X-Request-ID"] = request_id
        return response
