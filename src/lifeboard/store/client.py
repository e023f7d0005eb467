"""Supabase REST client — PostgREST tables and GoTrue auth over httpx.

Learn: Supabase is two HTTP APIs behind one base URL:
- /rest/v1/{table}  PostgREST. Filters are query params (user_id=eq.<id>),
  ordering is order=<col>.<asc|desc>, and writes echo the affected rows
  back when asked with "Prefer: return=representation".
- /auth/v1/*        GoTrue. OTP issue/verify, token introspection, logout.

Every request carries two credentials: the project's `apikey` and an
`Authorization: Bearer` token. For an anon client the bearer is the anon
key itself; for a per-user client it is the caller's access token, which
is what makes row-level security apply to *that* user.

A SupabaseClient holds no connections of its own — only header config —
and shares one httpx.AsyncClient pool with every other instance.
"""

from typing import Any, Optional

import httpx


class StoreError(Exception):
    """Raised when the provider rejects a call or cannot be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


def _encode(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _eq_filters(filters: dict[str, Any]) -> list[tuple[str, str]]:
    return [(column, f"eq.{_encode(value)}") for column, value in filters.items()]


def _error_from_response(resp: httpx.Response) -> StoreError:
    """Build a StoreError from a PostgREST or GoTrue error body."""
    message = resp.reason_phrase or f"HTTP {resp.status_code}"
    code = None
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = (
            body.get("message")
            or body.get("msg")
            or body.get("error_description")
            or body.get("error")
            or message
        )
        code = body.get("code") or body.get("error_code")
        if code is not None:
            code = str(code)
    return StoreError(str(message), status_code=resp.status_code, code=code)


def _json_body(resp: httpx.Response) -> Any:
    """Decode a success body. A 2xx that isn't JSON (proxy or gateway page) is a provider failure."""
    try:
        return resp.json()
    except ValueError as e:
        raise StoreError(
            f"Unreadable response body from {resp.request.url.path}",
            status_code=resp.status_code,
        ) from e


def _rows(resp: httpx.Response) -> list[dict[str, Any]]:
    body = _json_body(resp)
    if not isinstance(body, list):
        raise StoreError(
            f"Expected a list of rows from {resp.request.url.path}",
            status_code=resp.status_code,
        )
    return body


def _object(resp: httpx.Response) -> dict[str, Any]:
    body = _json_body(resp)
    if not isinstance(body, dict):
        raise StoreError(
            f"Expected an object from {resp.request.url.path}",
            status_code=resp.status_code,
        )
    return body


class SupabaseClient:
    """One provider handle bound to a single credential."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        url: str,
        api_key: str,
        access_token: Optional[str] = None,
    ):
        self._http = http
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token

    @property
    def headers(self) -> dict[str, str]:
        bearer = self.access_token or self.api_key
        return {"apikey": self.api_key, "Authorization": f"Bearer {bearer}"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[list[tuple[str, str]]] = None,
        json: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        merged = {**self.headers, **(headers or {})}
        try:
            resp = await self._http.request(
                method,
                f"{self.url}{path}",
                params=params,
                json=json,
                headers=merged,
            )
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {path} failed: {e}") from e

        if resp.status_code >= 400:
            raise _error_from_response(resp)
        return resp

    # ─── Tables (PostgREST) ──────────────────────────────

    async def select(
        self,
        table: str,
        *,
        filters: Optional[dict[str, Any]] = None,
        order: Optional[str] = None,
        ascending: bool = False,
    ) -> list[dict[str, Any]]:
        """SELECT * with equality filters and optional ordering."""
        params = [("select", "*"), *_eq_filters(filters or {})]
        if order:
            params.append(("order", f"{order}.{'asc' if ascending else 'desc'}"))
        resp = await self._request("GET", f"/rest/v1/{table}", params=params)
        return _rows(resp)

    async def insert(
        self,
        table: str,
        row: dict[str, Any],
        *,
        on_conflict: Optional[str] = None,
    ) -> dict[str, Any]:
        """INSERT one row (or upsert on the given columns) and return it."""
        params: list[tuple[str, str]] = []
        prefer = "return=representation"
        if on_conflict:
            params.append(("on_conflict", on_conflict))
            prefer = "resolution=merge-duplicates,return=representation"

        resp = await self._request(
            "POST",
            f"/rest/v1/{table}",
            params=params,
            json=row,
            headers={"Prefer": prefer},
        )
        rows = _rows(resp)
        if not rows:
            raise StoreError(f"Insert into {table} returned no row")
        return rows[0]

    async def update(
        self,
        table: str,
        values: dict[str, Any],
        *,
        filters: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """PATCH rows matching all filters; returns the rows actually changed."""
        if not filters:
            raise ValueError("Refusing to update without filters")
        resp = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=_eq_filters(filters),
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return _rows(resp)

    async def delete(self, table: str, *, filters: dict[str, Any]) -> None:
        """DELETE rows matching all filters. Matching nothing is not an error."""
        if not filters:
            raise ValueError("Refusing to delete without filters")
        await self._request("DELETE", f"/rest/v1/{table}", params=_eq_filters(filters))

    # ─── Auth (GoTrue) ───────────────────────────────────

    async def get_user(self, token: str) -> dict[str, Any]:
        """Resolve an access token to its user. Raises StoreError if invalid."""
        resp = await self._request(
            "GET",
            "/auth/v1/user",
            headers={"Authorization": f"Bearer {token}"},
        )
        return _object(resp)

    async def send_otp(self, email: str, *, create_user: bool = True) -> None:
        """Email a one-time code, creating the account on first sign-in."""
        await self._request(
            "POST",
            "/auth/v1/otp",
            json={"email": email, "create_user": create_user},
        )

    async def verify_otp(self, email: str, code: str) -> dict[str, Any]:
        """Exchange an emailed code for a session (access + refresh tokens)."""
        resp = await self._request(
            "POST",
            "/auth/v1/verify",
            json={"type": "email", "email": email, "token": code},
        )
        return _object(resp)

    async def sign_out(self, token: str) -> None:
        """Revoke every refresh token of the token's user."""
        await self._request(
            "POST",
            "/auth/v1/logout",
            params=[("scope", "global")],
            headers={"Authorization": f"Bearer {token}"},
        )
