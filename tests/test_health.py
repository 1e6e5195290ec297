"""Tests for GET /api/health."""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_returns_200(client: AsyncClient):
    resp = await client.get("/api/health/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["database"] == "ok"
    assert data["ollama"] == "ok"


@pytest.mark.asyncio
async def test_health_degraded_without_ollama(client: AsyncClient, fake_assistant):
    fake_assistant.healthy = False
    resp = await client.get("/api/health/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "degraded"
    assert data["ollama"] == "error"
    assert data["database"] == "ok"


@pytest.mark.asyncio
async def test_root_endpoint(client: AsyncClient):
    resp = await client.get("/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "PLAAFP Assistant API"
    assert data["endpoints"]["preview"] == "/api/preview"
