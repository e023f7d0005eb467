"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers (and at the
include_router level in api/__init__.py) to extract and validate the
current user from the request.

FastAPI caches a dependency per request, so mounting get_current_user on
the router *and* asking for it in a handler still costs one provider
round trip.
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, Request

from lifeboard.errors import unauthorized
from lifeboard.store.client import StoreError, SupabaseClient
from lifeboard.store.factory import get_anon_store, scoped_store

logger = structlog.get_logger()


class CurrentIdentity:
    """The authenticated user making the request.

    Learn: Lives only for the request. The raw token is kept so the
    scoped store client can forward it to Supabase.
    """

    def __init__(self, id: str, email: Optional[str], token: str):
        self.id = id
        self.email = email
        self.token = token

    def __repr__(self) -> str:
        return f"CurrentIdentity(id={self.id!r}, email={self.email!r})"


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[7:].strip()
    return token or None


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    store: SupabaseClient = Depends(get_anon_store),
) -> CurrentIdentity:
    """Resolve the Bearer token to a user (required — 401 if missing/invalid).

    Provider error detail is logged, never returned to the caller.
    """
    token = _bearer_token(authorization)
    if token is None:
        raise unauthorized("Missing or invalid authorization header")

    try:
        user = await store.get_user(token)
    except StoreError as e:
        logger.warning("auth.token_rejected", error=e.message, status=e.status_code)
        raise unauthorized("Invalid or expired token")

    if not user or not user.get("id"):
        logger.warning("auth.token_without_user")
        raise unauthorized("Invalid or expired token")

    identity = CurrentIdentity(id=user["id"], email=user.get("email"), token=token)
    request.state.user = identity
    return identity


def get_user_store(
    identity: CurrentIdentity = Depends(get_current_user),
) -> SupabaseClient:
    """Per-request store client carrying the caller's own credential."""
    return scoped_store(identity)
