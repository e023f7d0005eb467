"""Auth API — passwordless email sign-in, logout, session.

Learn: Routes for the OTP lifecycle, all delegated to Supabase Auth:
- POST /auth/send-otp   → email a 6-digit code (creates the account on first use)
- POST /auth/verify-otp → code → session tokens + profile upsert
- POST /auth/logout     → revoke the caller's refresh tokens (fail-open)
- GET  /auth/session    → the caller's profile

send-otp and verify-otp are the only open routes under the API prefix;
they are also the ones the rate limiter holds to the stricter budget.
"""

from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Request

from lifeboard.auth.dependencies import CurrentIdentity, get_current_user, get_user_store
from lifeboard.errors import ApiError
from lifeboard.schemas.auth import SendOtpRequest, VerifyOtpRequest
from lifeboard.schemas.envelope import success_response
from lifeboard.store.client import StoreError, SupabaseClient
from lifeboard.store.factory import get_admin_store, get_anon_store

logger = structlog.get_logger()

router = APIRouter(prefix="/auth")


def _epoch_ms(value: Any) -> Optional[int]:
    """Provider timestamps (ISO-8601) → epoch milliseconds."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def _now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def _user_payload(
    uid: str,
    email: Optional[str],
    name: Optional[str],
    created_at: Any,
) -> dict[str, Any]:
    return {
        "uid": uid,
        "email": email,
        "name": name,
        "createdTime": _epoch_ms(created_at),
        "lastLoginTime": _now_ms(),
    }


# ─── Send OTP ───────────────────────────────────────────


@router.post("/send-otp")
async def send_otp(
    request: Request,
    body: SendOtpRequest,
    store: SupabaseClient = Depends(get_anon_store),
):
    """Email a one-time sign-in code."""
    try:
        await store.send_otp(body.email, create_user=True)
    except StoreError as e:
        logger.error("auth.otp_send_failed", email=body.email, error=e.message, status=e.status_code)
        raise ApiError("OTP_SEND_FAILED", "Failed to send OTP", status_code=400)

    logger.info("auth.otp_sent", email=body.email)
    return success_response(request, {"message": "OTP sent to your email"})


# ─── Verify OTP ─────────────────────────────────────────


@router.post("/verify-otp")
async def verify_otp(
    request: Request,
    body: VerifyOtpRequest,
    store: SupabaseClient = Depends(get_anon_store),
    admin: SupabaseClient = Depends(get_admin_store),
):
    """Exchange the emailed code for a session.

    Learn: The profile upsert runs with the service key because the new
    user has no profiles row yet for row-level security to match. A
    failed upsert is logged but does not fail sign-in — the session is
    already valid at that point.
    """
    try:
        result = await store.verify_otp(body.email, body.code)
    except StoreError as e:
        logger.warning("auth.otp_invalid", email=body.email, error=e.message)
        raise ApiError("INVALID_OTP", "Invalid or expired OTP", status_code=400)

    user = result.get("user") or {}
    if not user.get("id"):
        logger.warning("auth.otp_without_user", email=body.email)
        raise ApiError("INVALID_OTP", "Invalid or expired OTP", status_code=400)

    name = (user.get("user_metadata") or {}).get("name")
    try:
        await admin.insert(
            "profiles",
            {
                "id": user["id"],
                "email": user.get("email"),
                "name": name,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            },
            on_conflict="id",
        )
    except StoreError as e:
        logger.error("auth.profile_upsert_failed", user_id=user["id"], error=e.message)

    logger.info("auth.signed_in", user_id=user["id"])
    return success_response(
        request,
        {
            "user": _user_payload(user["id"], user.get("email"), name, user.get("created_at")),
            "session": {
                "access_token": result.get("access_token"),
                "refresh_token": result.get("refresh_token"),
                "expires_at": result.get("expires_at"),
            },
        },
    )


# ─── Logout ─────────────────────────────────────────────


@router.post("/logout")
async def logout(
    request: Request,
    identity: CurrentIdentity = Depends(get_current_user),
    store: SupabaseClient = Depends(get_anon_store),
):
    """Revoke the caller's session.

    Fail-open: a provider error is logged and the client still gets a
    success, so local sign-out on the device is never blocked.
    """
    try:
        await store.sign_out(identity.token)
        logger.info("auth.logged_out", user_id=identity.id)
    except StoreError as e:
        logger.error("auth.logout_failed", user_id=identity.id, error=e.message)
    return success_response(request, {"message": "Logged out successfully"})


# ─── Session ────────────────────────────────────────────


@router.get("/session")
async def get_session(
    request: Request,
    identity: CurrentIdentity = Depends(get_current_user),
    store: SupabaseClient = Depends(get_user_store),
):
    """The caller's profile, read with their own credential."""
    try:
        rows = await store.select("profiles", filters={"id": identity.id})
    except StoreError as e:
        logger.error("auth.profile_fetch_failed", user_id=identity.id, error=e.message)
        rows = []

    if not rows:
        raise ApiError("USER_NOT_FOUND", "User profile not found", status_code=404)

    profile = rows[0]
    return success_response(
        request,
        {
            "user": _user_payload(
                profile["id"],
                profile.get("email"),
                profile.get("name"),
                profile.get("created_at"),
            )
        },
    )
