"""Tests for AI suggestion and screenshot extraction endpoints."""
import pytest
from httpx import AsyncClient

from app.models.record import ListKind, SectionField, TopLevelField
from app.services.assistant import OllamaAssistantService, is_not_found
from app.services.record_store import append_section, new_record
from app.utils.helpers import format_suggestion_html

_PNG = b"\x89PNG\r\n\x1a\n fake image bytes"


def _image(content_type: str = "image/png", data: bytes = _PNG):
    return {"image": ("clip.png", data, content_type)}


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_suggestion_uses_form_label(client: AsyncClient):
    resp = await client.post("/api/assist/suggestion", json={"field": "grade"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "Suggestion for Grade"
    assert data["content_html"] == "<p><strong>Tip:</strong> check the FIE report.</p>"


@pytest.mark.asyncio
async def test_suggestion_does_not_modify_record(client: AsyncClient):
    await client.post("/api/assist/suggestion", json={"field": "grade"})
    assert (await client.get("/api/record/")).json()["record"]["grade"] == ""


@pytest.mark.asyncio
async def test_impact_suggestion_needs_deficits(client: AsyncClient):
    resp = await client.post("/api/assist/suggestion", json={"field": "disabilityImpact"})
    assert resp.status_code == 422

    await client.put("/api/record/fields/academicDeficits", json={"value": "reading fluency"})
    resp = await client.post("/api/assist/suggestion", json={"field": "disabilityImpact"})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_suggestion_service_down(client: AsyncClient, fake_assistant):
    fake_assistant.fail = True
    resp = await client.post("/api/assist/suggestion", json={"field": "grade"})
    assert resp.status_code == 502


@pytest.mark.asyncio
async def test_suggestion_locator_checks(client: AsyncClient):
    resp = await client.post("/api/assist/suggestion", json={"field": "shoeSize"})
    assert resp.status_code == 404

    resp = await client.post(
        "/api/assist/suggestion", json={"field": "subject", "list_kind": "academic"}
    )
    assert resp.status_code == 422

    resp = await client.post(
        "/api/assist/suggestion",
        json={"field": "subject", "list_kind": "academic", "index": 0},
    )
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Screenshot extraction
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_extract_applies_value(client: AsyncClient, fake_assistant):
    await client.post("/api/record/sections/academic")

    resp = await client.post(
        "/api/assist/extract",
        files=_image(),
        data={"field": "staarProficient", "list_kind": "academic", "index": "0"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["applied"] is True
    assert data["value"] == "Reading Comprehension, Algebraic Reasoning"
    assert data["message"] == "Filled in STAAR Proficient Areas (TEKS)."
    assert fake_assistant.extract_calls == [SectionField(ListKind.ACADEMIC, 0, "staarProficient")]

    record = (await client.get("/api/record/")).json()["record"]
    assert record["academicSections"][0]["staarProficient"] == (
        "Reading Comprehension, Algebraic Reasoning"
    )


@pytest.mark.asyncio
async def test_extract_top_level_field(client: AsyncClient, fake_assistant):
    fake_assistant.extracted = "extended time, small group"
    resp = await client.post(
        "/api/assist/extract", files=_image("image/jpeg"), data={"field": "accommodations"}
    )
    assert resp.json()["applied"] is True
    assert fake_assistant.extract_calls == [TopLevelField("accommodations")]
    record = (await client.get("/api/record/")).json()["record"]
    assert record["accommodations"] == "extended time, small group"


@pytest.mark.asyncio
async def test_extract_nothing_found(client: AsyncClient, fake_assistant):
    fake_assistant.extracted = None
    resp = await client.post(
        "/api/assist/extract", files=_image(), data={"field": "grade"}
    )
    assert resp.status_code == 200
    assert resp.json()["applied"] is False
    assert (await client.get("/api/record/")).json()["record"]["grade"] == ""


@pytest.mark.asyncio
async def test_extract_invalid_choice_not_applied(client: AsyncClient, fake_assistant):
    fake_assistant.extracted = "sort of"
    resp = await client.post(
        "/api/assist/extract", files=_image(), data={"field": "deficitType"}
    )
    assert resp.status_code == 200
    assert resp.json()["applied"] is False
    assert (await client.get("/api/record/")).json()["record"]["deficitType"] == ""


@pytest.mark.asyncio
async def test_extract_rejects_bad_uploads(client: AsyncClient):
    resp = await client.post(
        "/api/assist/extract", files=_image("text/plain"), data={"field": "grade"}
    )
    assert resp.status_code == 400

    resp = await client.post(
        "/api/assist/extract", files=_image(data=b""), data={"field": "grade"}
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_extract_service_down(client: AsyncClient, fake_assistant):
    fake_assistant.fail = True
    resp = await client.post(
        "/api/assist/extract", files=_image(), data={"field": "grade"}
    )
    assert resp.status_code == 502


# ---------------------------------------------------------------------------
# Service helpers (no network)
# ---------------------------------------------------------------------------

def test_not_found_sentinel_detection():
    assert is_not_found("Information not found in image.")
    assert is_not_found("INFORMATION NOT FOUND")
    assert not is_not_found("Algebraic Reasoning")


def test_extraction_prompt_per_field():
    service = OllamaAssistantService()
    record = append_section(new_record(), ListKind.SUMMARY, {"subject": "Algebra I"})

    staar = service.extraction_prompt(
        SectionField(ListKind.ACADEMIC, 0, "staarDeficits"), "STAAR Deficit Areas", record
    )
    assert "biggest deficit" in staar

    score = service.extraction_prompt(
        SectionField(ListKind.SUMMARY, 0, "rawScore"), "Raw Score", record
    )
    assert '"Algebra I"' in score
    assert "raw score" in score

    generic = service.extraction_prompt(TopLevelField("grade"), "Grade", record)
    assert '"Grade" field' in generic


def test_format_suggestion_html_escapes_and_spaces():
    html = format_suggestion_html("**Where:** FIE\n\n<script>")
    assert html == (
        "<p><strong>Where:</strong> FIE</p><p>&nbsp;</p><p>&lt;script&gt;</p>"
    )
