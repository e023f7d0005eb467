"""Rate limiting middleware — Redis-based fixed window.

Learn: Each client IP gets a counter per window, keyed like
"lifeboard:rl:{ip}:{bucket}:{window}". The OTP endpoints get their own,
much smaller bucket (5 per 15 minutes by default) so nobody can spray
sign-in codes at an inbox or brute-force a 6-digit code.

Gracefully skips rate limiting if Redis is unavailable (e.g., in tests).
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from lifeboard.schemas.envelope import error_response

logger = structlog.get_logger()

AUTH_PATH_SUFFIXES = ("/auth/send-otp", "/auth/verify-otp")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Redis-based rate limiting per IP per window."""

    def __init__(
        self,
        app,
        max_requests: int = 100,
        auth_max_requests: int = 5,
        window_seconds: int = 900,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.auth_max_requests = auth_max_requests
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next) -> Response:
        # Try to get Redis — skip rate limiting if unavailable
        try:
            from lifeboard.cache import get_redis

            redis = get_redis()
        except RuntimeError:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        is_auth = request.url.path.endswith(AUTH_PATH_SUFFIXES)
        limit = self.auth_max_requests if is_auth else self.max_requests

        window = int(time.time() // self.window_seconds)
        bucket = "auth" if is_auth else "api"
        key = f"lifeboard:rl:{client_ip}:{bucket}:{window}"

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, self.window_seconds * 2)
        except Exception as e:
            # Redis error — don't block the request
            logger.warning("rate_limit.redis_error", error=str(e))
            return await call_next(request)

        if count > limit:
            message = (
                "Too many authentication attempts, please try again later."
                if is_auth
                else "Too many requests from this IP, please try again later."
            )
            return error_response(
                request,
                "RATE_LIMITED",
                message,
                status_code=429,
                headers={"Retry-After": str(self.window_seconds)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, limit - count))
        return response
