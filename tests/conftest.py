"""Test fixtures — the real app against an in-memory Supabase.

Learn: Testing pattern for a facade over a hosted backend:

1. FakeSupabase keeps tables and users in dicts and exposes the exact
   method surface of lifeboard.store.client.SupabaseClient.
2. It emulates row-level security: a client built with a user's token
   only ever sees that user's rows, like the real policies do.
3. Every call is recorded, so tests can assert that a request never
   reached the store at all (e.g. rejected by the auth guard).
4. The store factories are swapped in via app.dependency_overrides —
   the auth guard, services and routes all run for real.
"""

import itertools
import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest
import pytest_asyncio
from fastapi import Depends
from httpx import ASGITransport, AsyncClient

from lifeboard.auth.dependencies import CurrentIdentity, get_current_user, get_user_store
from lifeboard.main import app
from lifeboard.store.client import StoreError
from lifeboard.store.factory import get_admin_store, get_anon_store

TABLE_OPS = {"select", "insert", "update", "delete"}


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class FakeSupabase:
    """In-memory provider: tables, users, OTP codes, and a call log."""

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.users: dict[str, dict[str, Any]] = {}  # access token → user
        self.otp_codes: dict[str, str] = {}  # email → pending code
        self.signed_out: list[str] = []
        self.calls: list[dict[str, Any]] = []
        self._failures: dict[str, Exception] = {}
        self._clock = itertools.count(1)

    # ─── Test controls ───────────────────────────────────

    def add_user(self, email: str, token: Optional[str] = None) -> dict[str, Any]:
        user = {
            "id": str(uuid.uuid4()),
            "email": email,
            "user_metadata": {},
            "created_at": "2024-01-15T08:30:00.000000+00:00",
        }
        self.users[token or f"token-{uuid.uuid4().hex}"] = user
        return user

    def token_for(self, user: dict[str, Any]) -> str:
        return next(t for t, u in self.users.items() if u["id"] == user["id"])

    def fail(self, op: str, error: Optional[Exception] = None) -> None:
        """Make the next call to `op` raise (StoreError by default)."""
        self._failures[op] = error or StoreError("upstream exploded", status_code=503)

    def table_calls(self) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["op"] in TABLE_OPS]

    def client(self, token: Optional[str] = None, admin: bool = False) -> "FakeStoreClient":
        return FakeStoreClient(self, token=token, admin=admin)

    # ─── Internals ───────────────────────────────────────

    def _record(self, op: str, token: Optional[str], **details: Any) -> None:
        self.calls.append({"op": op, "token": token, **details})
        if op in self._failures:
            raise self._failures.pop(op)

    def _now(self) -> str:
        tick = next(self._clock)
        moment = datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=tick)
        return moment.isoformat()


class FakeStoreClient:
    """Same methods as SupabaseClient, backed by FakeSupabase."""

    def __init__(self, backend: FakeSupabase, token: Optional[str], admin: bool):
        self.backend = backend
        self.access_token = token
        self.admin = admin

    def _visible(self, table: str) -> list[dict[str, Any]]:
        rows = self.backend.tables[table]
        if self.admin:
            return rows
        user = self.backend.users.get(self.access_token or "")
        if user is None:
            return []
        owner = "id" if table == "profiles" else "user_id"
        return [r for r in rows if r.get(owner) == user["id"]]

    @staticmethod
    def _matches(row: dict[str, Any], filters: dict[str, Any]) -> bool:
        return all(_text(row.get(k)) == _text(v) for k, v in filters.items())

    # ─── Tables ──────────────────────────────────────────

    async def select(self, table, *, filters=None, order=None, ascending=False):
        self.backend._record("select", self.access_token, table=table, filters=filters, order=order, ascending=ascending)
        rows = [dict(r) for r in self._visible(table) if self._matches(r, filters or {})]
        if order:
            rows.sort(key=lambda r: (r.get(order) is None, r.get(order)), reverse=not ascending)
        return rows

    async def insert(self, table, row, *, on_conflict=None):
        self.backend._record("insert", self.access_token, table=table, row=row, on_conflict=on_conflict)
        if on_conflict:
            keys = {c: row.get(c) for c in on_conflict.split(",")}
            for existing in self.backend.tables[table]:
                if self._matches(existing, keys):
                    existing.update(row)
                    return dict(existing)
        stored = {"id": str(uuid.uuid4()), "created_at": self.backend._now(), **row}
        self.backend.tables[table].append(stored)
        return dict(stored)

    async def update(self, table, values, *, filters):
        self.backend._record("update", self.access_token, table=table, values=values, filters=filters)
        changed = []
        for row in self._visible(table):
            if self._matches(row, filters):
                row.update(values)
                changed.append(dict(row))
        return changed

    async def delete(self, table, *, filters):
        self.backend._record("delete", self.access_token, table=table, filters=filters)
        doomed = [r for r in self._visible(table) if self._matches(r, filters)]
        self.backend.tables[table] = [
            r for r in self.backend.tables[table] if not any(r is d for d in doomed)
        ]

    # ─── Auth ────────────────────────────────────────────

    async def get_user(self, token):
        self.backend._record("get_user", token)
        user = self.backend.users.get(token)
        if user is None:
            raise StoreError("invalid JWT: unable to parse or verify signature", status_code=401)
        return dict(user)

    async def send_otp(self, email, *, create_user=True):
        self.backend._record("send_otp", None, email=email, create_user=create_user)
        self.backend.otp_codes[email] = "123456"

    async def verify_otp(self, email, code):
        self.backend._record("verify_otp", None, email=email, code=code)
        if self.backend.otp_codes.get(email) != code:
            raise StoreError("Token has expired or is invalid", status_code=403)
        del self.backend.otp_codes[email]
        existing = next((u for u in self.backend.users.values() if u["email"] == email), None)
        user = existing or self.backend.add_user(email)
        token = f"token-{uuid.uuid4().hex}"
        self.backend.users[token] = user
        return {
            "access_token": token,
            "refresh_token": f"refresh-{uuid.uuid4().hex}",
            "expires_at": 1893456000,
            "token_type": "bearer",
            "user": dict(user),
        }

    async def sign_out(self, token):
        self.backend._record("sign_out", token)
        self.backend.signed_out.append(token)


@pytest.fixture()
def fake_supabase():
    return FakeSupabase()


def _install_overrides(fake: FakeSupabase) -> None:
    def override_user_store(identity: CurrentIdentity = Depends(get_current_user)):
        return fake.client(token=identity.token)

    app.dependency_overrides[get_anon_store] = lambda: fake.client()
    app.dependency_overrides[get_admin_store] = lambda: fake.client(admin=True)
    app.dependency_overrides[get_user_store] = override_user_store


@pytest_asyncio.fixture()
async def client(fake_supabase):
    """HTTP client talking to the real app, with Supabase replaced by the fake."""
    _install_overrides(fake_supabase)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def lenient_client(fake_supabase):
    """Like `client`, but app exceptions come back as 500 responses instead of raising.

    Learn: httpx's ASGITransport re-raises any exception that reaches
    Starlette's outermost error layer, even after a 500 was sent. Tests
    that only care about the response body use this client.
    """
    _install_overrides(fake_supabase)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
def alice(fake_supabase):
    return fake_supabase.add_user("alice@example.com", token="alice-token")


@pytest.fixture()
def bob(fake_supabase):
    return fake_supabase.add_user("bob@example.com", token="bob-token")


@pytest.fixture()
def alice_headers(alice):
    return {"Authorization": "Bearer alice-token"}


@pytest.fixture()
def bob_headers(bob):
    return {"Authorization": "Bearer bob-token"}
