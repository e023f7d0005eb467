"""Response envelope shared by every endpoint.

Learn: Clients never see bare JSON payloads. Success and failure both
come wrapped as

    {"success": true,  "data": {...},  "meta": {"timestamp", "requestId"}}
    {"success": false, "error": {code, message, details?}, "meta": {...}}

The request id comes from RequestIdMiddleware via request.state, so the
body and the X-Request-ID header always agree. Keys with no value
(details, requestId) are left out rather than sent as null; row data
inside "data" is passed through untouched, nulls included.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_meta(request: Optional[Request]) -> dict[str, str]:
    meta = {"timestamp": utc_timestamp()}
    request_id = getattr(request.state, "request_id", None) if request else None
    if request_id:
        meta["requestId"] = request_id
    return meta


def success_response(
    request: Optional[Request],
    data: Any,
    status_code: int = 200,
) -> JSONResponse:
    body = {
        "success": True,
        "data": jsonable_encoder(data),
        "meta": build_meta(request),
    }
    return JSONResponse(status_code=status_code, content=body)


def error_response(
    request: Optional[Request],
    code: str,
    message: str,
    status_code: int = 500,
    details: Optional[Any] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = jsonable_encoder(details)
    body = {"success": False, "error": error, "meta": build_meta(request)}
    return JSONResponse(status_code=status_code, content=body, headers=headers)
