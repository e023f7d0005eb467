"""Liveness endpoint tests."""

import pytest


@pytest.mark.asyncio
async def test_liveness_is_open(client, fake_supabase):
    """Root /health answers without a token and without touching Supabase."""
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["timestamp"].endswith("Z")
    assert fake_supabase.calls == []


@pytest.mark.asyncio
async def test_api_health_is_the_tracking_resource(client):
    """/api/v1/health is health tracking, so it needs a token."""
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "UNAUTHORIZED"
