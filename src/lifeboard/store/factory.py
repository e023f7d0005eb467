"""Store client factory — shared pool, shared anon/admin handles, per-user handles.

Learn: Three kinds of client, one connection pool:
- anon:  anon key as bearer. Used for OTP issue/verify and token checks.
- admin: service key as bearer. Bypasses row-level security, so it is
         only used for the profile upsert right after sign-in.
- user:  anon key + the caller's access token. Built fresh per request and
         never shared across identities; row-level security scopes it.

The anon and admin handles are created lazily on first use and live for
the process. The httpx pool is closed in the app lifespan.
"""

from typing import Optional

import httpx

from lifeboard.config import settings
from lifeboard.store.client import SupabaseClient

_http: Optional[httpx.AsyncClient] = None
_anon: Optional[SupabaseClient] = None
_admin: Optional[SupabaseClient] = None


def get_http_client() -> httpx.AsyncClient:
    """The process-wide connection pool (transport-default timeouts)."""
    global _http
    if _http is None:
        _http = httpx.AsyncClient()
    return _http


async def close_http_client() -> None:
    """Close the pool and forget the handles riding on it."""
    global _http, _anon, _admin
    if _http is not None:
        await _http.aclose()
    _http = None
    _anon = None
    _admin = None


def get_anon_store() -> SupabaseClient:
    global _anon
    if _anon is None:
        _anon = SupabaseClient(
            get_http_client(),
            settings.supabase_url,
            settings.supabase_anon_key,
        )
    return _anon


def get_admin_store() -> SupabaseClient:
    global _admin
    if _admin is None:
        _admin = SupabaseClient(
            get_http_client(),
            settings.supabase_url,
            settings.supabase_service_key,
        )
    return _admin


def scoped_store(identity) -> SupabaseClient:
    """Build a client that acts as the authenticated caller.

    Takes the CurrentIdentity attached by the auth guard. Raises
    RuntimeError when called without one — that is a wiring bug, not a
    client error, and surfaces as INTERNAL_ERROR.
    """
    token = getattr(identity, "token", None)
    if not token:
        raise RuntimeError("No user token provided for store client")
    return SupabaseClient(
        get_http_client(),
        settings.supabase_url,
        settings.supabase_anon_key,
        access_token=token,
    )
