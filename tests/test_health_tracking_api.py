"""Health tracking API tests.

Learn: One record per user per day. POSTing a date that already has a
record merges into it instead of adding a second row.
"""

import pytest


@pytest.mark.asyncio
async def test_create_health_record(client, fake_supabase, alice, alice_headers):
    resp = await client.post(
        "/api/v1/health",
        json={"date": "2024-05-01", "sleep_hours": 7.5, "water_glasses": 6},
        headers=alice_headers,
    )
    assert resp.status_code == 201
    item = resp.json()["data"]["item"]
    assert item["sleep_hours"] == 7.5
    assert item["user_id"] == alice["id"]

    insert = [c for c in fake_supabase.calls if c["op"] == "insert"][-1]
    assert insert["table"] == "health_tracking"
    assert insert["on_conflict"] == "user_id,date"


@pytest.mark.asyncio
async def test_same_date_upserts(client, fake_supabase, alice_headers):
    first = await client.post(
        "/api/v1/health",
        json={"date": "2024-05-01", "sleep_hours": 6},
        headers=alice_headers,
    )
    second = await client.post(
        "/api/v1/health",
        json={"date": "2024-05-01", "sleep_hours": 8, "mood": "good"},
        headers=alice_headers,
    )
    assert second.status_code == 201
    assert second.json()["data"]["item"]["id"] == first.json()["data"]["item"]["id"]

    (row,) = fake_supabase.tables["health_tracking"]
    assert row["sleep_hours"] == 8
    assert row["mood"] == "good"


@pytest.mark.asyncio
async def test_same_date_different_users_are_separate(client, fake_supabase, alice_headers, bob_headers):
    await client.post("/api/v1/health", json={"date": "2024-05-01"}, headers=alice_headers)
    await client.post("/api/v1/health", json={"date": "2024-05-01"}, headers=bob_headers)
    assert len(fake_supabase.tables["health_tracking"]) == 2


@pytest.mark.asyncio
async def test_list_with_date_filter(client, alice_headers):
    for day in ("2024-05-01", "2024-05-02", "2024-05-03"):
        await client.post("/api/v1/health", json={"date": day}, headers=alice_headers)

    resp = await client.get("/api/v1/health", headers=alice_headers)
    assert [r["date"] for r in resp.json()["data"]["items"]] == [
        "2024-05-03",
        "2024-05-02",
        "2024-05-01",
    ]

    resp = await client.get(
        "/api/v1/health", params={"date": "2024-05-02"}, headers=alice_headers
    )
    assert [r["date"] for r in resp.json()["data"]["items"]] == ["2024-05-02"]


@pytest.mark.asyncio
async def test_update_and_delete_health_record(client, fake_supabase, alice_headers):
    resp = await client.post(
        "/api/v1/health", json={"date": "2024-05-01"}, headers=alice_headers
    )
    record = resp.json()["data"]["item"]

    resp = await client.put(
        f"/api/v1/health/{record['id']}", json={"steps": 9000}, headers=alice_headers
    )
    assert resp.json()["data"]["item"]["steps"] == 9000

    resp = await client.delete(f"/api/v1/health/{record['id']}", headers=alice_headers)
    assert resp.json()["data"]["message"] == "Health data deleted successfully"
    assert fake_supabase.tables["health_tracking"] == []


@pytest.mark.asyncio
async def test_update_missing_record_is_404(client, alice_headers):
    resp = await client.put(
        "/api/v1/health/missing", json={"steps": 1}, headers=alice_headers
    )
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "Health data not found"


@pytest.mark.asyncio
async def test_health_fetch_failed(client, fake_supabase, alice_headers):
    fake_supabase.fail("select")
    resp = await client.get("/api/v1/health", headers=alice_headers)
    assert resp.status_code == 500
    assert resp.json()["error"] == {
        "code": "FETCH_FAILED",
        "message": "Failed to fetch health data",
    }
