"""Tests for the in-memory editor session (form <-> preview binding loop)."""
import pytest

from app.models.record import ListKind, SectionField
from app.services.editor_session import EditorSession
from app.services.errors import UnknownFieldError


def test_form_edit_shows_up_in_next_render():
    session = EditorSession()
    session.set_field("studentName", "Jordan")
    assert "Jordan" in session.render()


def test_unchanged_preview_is_a_no_op():
    session = EditorSession()
    session.set_field("studentName", "Jordan")
    html = session.render()
    record = session.record

    assert session.apply_preview_edit(html) is False
    assert session.record is record


def test_preview_edit_updates_record():
    session = EditorSession()
    session.append_section(ListKind.ACADEMIC, {"subject": "Math"})
    html = session.render().replace(">Math<", ">Geometry<")

    assert session.apply_preview_edit(html) is True
    assert session.record.academic_sections[0].subject == "Geometry"


def test_apply_routes_through_store():
    session = EditorSession()
    session.append_section(ListKind.SUMMARY)
    session.apply(SectionField(ListKind.SUMMARY, 0, "taksScore"), "1452")
    assert session.record.performance_summary_sections[0].taks_score == "1452"


def test_apply_to_removed_section_raises():
    session = EditorSession()
    with pytest.raises(IndexError):
        session.apply(SectionField(ListKind.SUMMARY, 0, "taksScore"), "1452")


def test_unknown_field_raises():
    session = EditorSession()
    with pytest.raises(UnknownFieldError):
        session.set_field("nope", "x")


def test_reset_and_load():
    session = EditorSession()
    session.set_field("studentName", "Jordan")
    session.document_id = "doc-1"
    session.render()

    session.reset()
    assert session.record.student_name == ""
    assert session.document_id is None
    assert session.last_html == ""

    other = EditorSession()
    other.set_field("studentName", "Sam")
    session.load("doc-2", other.record)
    assert session.document_id == "doc-2"
    assert session.record.student_name == "Sam"


def test_form_edit_after_render_survives_preview_edit():
    session = EditorSession()
    session.append_section(ListKind.ACADEMIC, {"subject": "Math"})
    html = session.render()
    session.set_field("grade", "6th")

    edited = html.replace(">(area)<", ">fractions<")

    assert session.apply_preview_edit(edited) is True
    assert session.record.grade == "6th"
    assert session.record.academic_sections[0].critical_needs == "fractions"
    assert session.record.academic_sections[0].subject == "Math"


def test_stale_untouched_preview_keeps_newer_form_edits():
    session = EditorSession()
    session.set_field("studentName", "Jordan")
    html = session.render()
    session.set_field("studentName", "Jordan B.")
    session.set_field("grade", "5th")
    record = session.record

    assert session.apply_preview_edit(html.replace("<p>", "<p> ", 1)) is False
    assert session.record is record
