"""Unhandled error middleware.

Learn: Registered first, so it runs innermost, right around the routes.
An exception escaping a handler is turned into the INTERNAL_ERROR
envelope here, and the response then passes back out through CORS,
rate limiting, security headers and request id like any other.
Starlette's own 500 handler sits outside all user middleware, so a
response built there would miss those headers.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from lifeboard.errors import internal_error_response


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Render escaped exceptions as the error envelope."""

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return internal_error_response(request, exc)
