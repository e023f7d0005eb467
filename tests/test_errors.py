"""Error envelope tests — every failure leaves in the same shape."""

import pytest

from lifeboard.config import settings


@pytest.mark.asyncio
async def test_unknown_endpoint(client):
    r = await client.get("/api/v1/nowhere")
    assert r.status_code == 404
    body = r.json()
    assert body["success"] is False
    assert body["error"] == {"code": "NOT_FOUND", "message": "Endpoint not found"}
    assert body["meta"]["requestId"] == r.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_wrong_method(client):
    r = await client.patch("/health")
    assert r.status_code == 405
    assert r.json()["error"]["code"] == "METHOD_NOT_ALLOWED"


@pytest.mark.asyncio
async def test_malformed_json_body(client, alice_headers):
    r = await client.post(
        "/api/v1/tasks",
        content=b"{not json",
        headers={**alice_headers, "Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_body_must_be_an_object(client, fake_supabase, alice_headers):
    r = await client.post("/api/v1/tasks", json=["not", "a", "task"], headers=alice_headers)
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"
    assert fake_supabase.table_calls() == []


@pytest.mark.asyncio
async def test_internal_error_has_trace_outside_production(lenient_client, fake_supabase, alice_headers):
    fake_supabase.fail("select", ZeroDivisionError("division by zero"))
    r = await lenient_client.get("/api/v1/journal", headers=alice_headers)
    assert r.status_code == 500
    assert "ZeroDivisionError" in r.json()["error"]["details"]


@pytest.mark.asyncio
async def test_internal_error_hides_trace_in_production(lenient_client, fake_supabase, alice_headers, monkeypatch):
    monkeypatch.setattr(settings, "environment", "production")
    fake_supabase.fail("select", ZeroDivisionError("division by zero"))
    r = await lenient_client.get("/api/v1/journal", headers=alice_headers)
    assert r.status_code == 500
    error = r.json()["error"]
    assert error["code"] == "INTERNAL_ERROR"
    assert "details" not in error


@pytest.mark.asyncio
async def test_internal_error_keeps_cors_and_security_headers(client, fake_supabase, alice_headers):
    """A browser on an allowed origin can still read the INTERNAL_ERROR envelope."""
    origin = "http://localhost:5173"
    fake_supabase.fail("select", KeyError("boom"))
    r = await client.get("/api/v1/tasks", headers={**alice_headers, "Origin": origin})
    assert r.status_code == 500
    assert r.json()["error"]["code"] == "INTERNAL_ERROR"
    assert r.headers["Access-Control-Allow-Origin"] == origin
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.json()["meta"]["requestId"] == r.headers["X-Request-ID"]
