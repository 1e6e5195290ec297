"""Tests for the live preview and reverse-sync endpoints."""
import pytest
from httpx import AsyncClient


async def _jordan_math(client: AsyncClient) -> None:
    await client.put("/api/record/fields/studentName", json={"value": "Jordan"})
    await client.post("/api/record/sections/academic", json={"template": {"subject": "Math"}})


@pytest.mark.asyncio
async def test_preview_renders_record(client: AsyncClient):
    await _jordan_math(client)

    resp = await client.get("/api/preview/")
    assert resp.status_code == 200
    data = resp.json()

    assert "Academics: Math" in data["html"]
    assert 'data-field="studentName"' in data["html"]
    assert data["values"][0] == {
        "field": "studentName", "list_kind": None, "index": None, "text": "Jordan",
    }
    subject = next(v for v in data["values"] if v["list_kind"] == "academic")
    assert subject == {"field": "subject", "list_kind": "academic", "index": 0, "text": "Math"}


@pytest.mark.asyncio
async def test_unchanged_preview_post_changes_nothing(client: AsyncClient):
    await _jordan_math(client)
    html = (await client.get("/api/preview/")).json()["html"]

    resp = await client.post("/api/preview/", json={"html": html})
    assert resp.status_code == 200
    data = resp.json()
    assert data["changed"] is False
    assert data["record"]["grade"] == ""


@pytest.mark.asyncio
async def test_preview_edit_flows_back_to_record(client: AsyncClient):
    await _jordan_math(client)
    html = (await client.get("/api/preview/")).json()["html"]
    edited = html.replace(">(grade)<", ">6th<")

    resp = await client.post("/api/preview/", json={"html": edited})
    data = resp.json()
    assert data["changed"] is True
    assert data["record"]["grade"] == "6th"
    assert data["record"]["academicSections"][0]["subject"] == "Math"
    assert ">6th</span> grade student" in data["html"]

    record = (await client.get("/api/record/")).json()["record"]
    assert record["grade"] == "6th"


@pytest.mark.asyncio
async def test_garbage_preview_is_ignored(client: AsyncClient):
    await _jordan_math(client)
    resp = await client.post("/api/preview/", json={"html": "<<<not html"})
    assert resp.status_code == 200
    assert resp.json()["changed"] is False
    assert resp.json()["record"]["studentName"] == "Jordan"
