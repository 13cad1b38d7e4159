"""Health endpoint tests."""

import pytest

from keepmark import __version__


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint should return server status, version and DB check."""
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["server"] == "ok"
    assert data["database"] == "ok"
    assert data["version"] == __version__


@pytest.mark.asyncio
async def test_health_is_open(client):
    resp = await client.get("/health", headers={"Authorization": "Bearer nonsense"})
    assert resp.status_code == 200
