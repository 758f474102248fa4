"""Health endpoint tests."""

import pytest


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint should return server status, version and database state."""
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["server"] == "ok"
    assert data["database"] == "ok"
    assert data["status"] == "healthy"
    assert "version" in data


@pytest.mark.asyncio
async def test_health_needs_no_token(client):
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
