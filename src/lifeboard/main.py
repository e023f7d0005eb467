"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (Redis, the Supabase HTTP
pool). Middleware, CORS, exception handlers and routers all registered
here; each concern lives in its own module.

Every response, including failures raised deep inside a dependency, leaves
as the envelope built in schemas/envelope.py. The handlers below are the
only place errors are turned into HTTP.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from lifeboard import __version__
from lifeboard.api import api_router
from lifeboard.api.health import router as liveness_router
from lifeboard.config import settings
from lifeboard.errors import ApiError, internal_error_response
from lifeboard.log import configure_logging
from lifeboard.schemas.envelope import error_response

logger = structlog.get_logger()

_STATUS_CODES = {
    404: ("NOT_FOUND", "Endpoint not found"),
    405: ("METHOD_NOT_ALLOWED", "Method not allowed"),
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: FastAPI lifespan replaces on_event("startup") / on_event("shutdown").
    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    logger.info(
        "lifeboard.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
        api_prefix=settings.api_prefix,
    )

    from lifeboard.cache import close_redis, init_redis
    try:
        await init_redis()
        logger.info("lifeboard.redis_connected", url=settings.redis_url)
    except Exception as e:
        logger.warning("lifeboard.redis_unavailable", error=str(e))
        # Redis is optional — requests just aren't rate limited without it

    yield

    logger.info("lifeboard.shutdown")
    await close_redis()

    from lifeboard.store.factory import close_http_client
    await close_http_client()


# ─── Exception handlers ─────────────────────────────────


async def handle_api_error(request: Request, exc: ApiError):
    return error_response(
        request,
        exc.code,
        exc.message,
        status_code=exc.status_code,
        details=exc.details,
        headers=exc.headers,
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return error_response(
        request,
        "VALIDATION_ERROR",
        "Invalid request data",
        status_code=400,
        details=details,
    )


async def handle_http_error(request: Request, exc: StarletteHTTPException):
    code, message = _STATUS_CODES.get(exc.status_code, ("HTTP_ERROR", str(exc.detail)))
    return error_response(
        request,
        code,
        message,
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    """Fallback for failures raised outside the routes (e.g. in middleware).

    Learn: Errors from handlers are already caught by UnhandledErrorMiddleware.
    This one runs in Starlette's ServerErrorMiddleware, outside the user
    middleware stack, so the request id header is set here by hand.
    """
    request_id = getattr(request.state, "request_id", None)
    return internal_error_response(
        request,
        exc,
        headers={"X-Request-ID": request_id} if request_id else None,
    )


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging(settings.log_level, json_output=settings.is_production)

    app = FastAPI(
        title="Lifeboard API",
        description="Tasks, goals, habits, health and journal — scoped per user, stored in Supabase",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → RateLimit → CORS → UnhandledError → handler

    from lifeboard.middleware.errors import UnhandledErrorMiddleware
    from lifeboard.middleware.rate_limit import RateLimitMiddleware
    from lifeboard.middleware.request_id import RequestIdMiddleware
    from lifeboard.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_max_requests,
        auth_max_requests=settings.auth_rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # ── Error envelope ────────────────────────────────────────
    app.add_exception_handler(ApiError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    # Liveness at the root; everything else under /api/{version}
    app.include_router(liveness_router, tags=["liveness"])
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: lifeboard.main:app)
app = create_app()
