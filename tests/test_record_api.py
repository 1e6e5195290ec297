"""Tests for the record editing and form catalog endpoints."""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_get_blank_record(client: AsyncClient):
    resp = await client.get("/api/record/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["document_id"] is None
    assert data["record"]["studentName"] == ""
    assert data["record"]["academicSections"] == []
    assert data["record"]["performanceSummarySections"] == []


@pytest.mark.asyncio
async def test_update_top_level_field(client: AsyncClient):
    resp = await client.put("/api/record/fields/studentName", json={"value": "Jordan"})
    assert resp.status_code == 200
    assert resp.json()["record"]["studentName"] == "Jordan"

    resp = await client.put("/api/record/fields/grade", json={"value": "5th"})
    record = resp.json()["record"]
    assert record["studentName"] == "Jordan"
    assert record["grade"] == "5th"


@pytest.mark.asyncio
async def test_update_unknown_field_returns_404(client: AsyncClient):
    resp = await client.put("/api/record/fields/shoeSize", json={"value": "9"})
    assert resp.status_code == 404
    assert "shoeSize" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_choice_field_is_validated(client: AsyncClient):
    resp = await client.put("/api/record/fields/deficitType", json={"value": "sometimes"})
    assert resp.status_code == 422

    resp = await client.put("/api/record/fields/deficitType", json={"value": "relative"})
    assert resp.status_code == 200
    assert resp.json()["record"]["deficitType"] == "relative"


@pytest.mark.asyncio
async def test_add_sections(client: AsyncClient):
    resp = await client.post("/api/record/sections/academic")
    assert resp.status_code == 201
    resp = await client.post(
        "/api/record/sections/summary", json={"template": {"subject": "Math"}}
    )
    assert resp.status_code == 201

    record = resp.json()["record"]
    assert len(record["academicSections"]) == 1
    assert record["academicSections"][0]["id"]
    assert record["performanceSummarySections"][0]["subject"] == "Math"


@pytest.mark.asyncio
async def test_add_section_bad_template(client: AsyncClient):
    resp = await client.post(
        "/api/record/sections/summary", json={"template": {"criticalNeeds": "x"}}
    )
    assert resp.status_code == 422

    resp = await client.post(
        "/api/record/sections/summary",
        json={"template": {"passedStateAssessment": "maybe"}},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_add_section_unknown_kind(client: AsyncClient):
    resp = await client.post("/api/record/sections/history")
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_update_section_field(client: AsyncClient):
    await client.post("/api/record/sections/academic")
    await client.post("/api/record/sections/academic")

    resp = await client.put(
        "/api/record/sections/academic/1/subject", json={"value": "Reading"}
    )
    assert resp.status_code == 200
    sections = resp.json()["record"]["academicSections"]
    assert sections[0]["subject"] == ""
    assert sections[1]["subject"] == "Reading"


@pytest.mark.asyncio
async def test_update_section_field_out_of_range(client: AsyncClient):
    await client.post("/api/record/sections/summary")
    resp = await client.put(
        "/api/record/sections/summary/3/subject", json={"value": "Math"}
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_section_field_wrong_list(client: AsyncClient):
    await client.post("/api/record/sections/summary")
    resp = await client.put(
        "/api/record/sections/summary/0/readingFluency", json={"value": "90"}
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_form_catalog(client: AsyncClient):
    resp = await client.get("/api/form/")
    assert resp.status_code == 200
    steps = resp.json()["steps"]

    assert [s["title"] for s in steps] == [
        "Introductory", "Academics", "Functional", "Transition", "Summary",
    ]
    assert steps[1]["list_kind"] == "academic"
    deficit = next(f for f in steps[0]["fields"] if f["name"] == "deficitType")
    assert deficit["kind"] == "select"
    assert {o["value"] for o in deficit["options"]} == {"normative", "relative"}
    assert "Student Alpha" in resp.json()["sample_student_names"]
