"""
Record editing endpoints (the form side of the binding loop).

GET  /                                     — current Record
PUT  /fields/{name}                        — set one top-level field
POST /sections/{list_kind}                 — append an academic / summary section
PUT  /sections/{list_kind}/{index}/{name}  — set one field of a section
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status

from app.models.record import ListKind
from app.models.schemas import FieldUpdateRequest, RecordResponse, SectionAppendRequest
from app.services.editor_session import EditorSession, get_editor_session
from app.services.errors import UnknownFieldError
from app.services.form_catalog import is_known_field, validate_choice

logger = logging.getLogger(__name__)

router = APIRouter()


def _record_response(session: EditorSession) -> RecordResponse:
    return RecordResponse(document_id=session.document_id, record=session.record)


def _require_field(name: str, list_kind: Optional[ListKind] = None) -> None:
    if not is_known_field(name, list_kind):
        where = f"{list_kind.value} section" if list_kind else "record"
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown {where} field '{name}'.",
        )


def _require_valid_choice(name: str, value: str, list_kind: Optional[ListKind] = None) -> None:
    try:
        validate_choice(name, value, list_kind)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        )


@router.get("/", response_model=RecordResponse)
async def get_record(session: EditorSession = Depends(get_editor_session)):
    """Return the Record currently open in the editor."""
    return _record_response(session)


@router.put("/fields/{name}", response_model=RecordResponse)
async def update_field(
    name: str,
    request: FieldUpdateRequest,
    session: EditorSession = Depends(get_editor_session),
):
    """Replace a single top-level field; every other field is left untouched."""
    _require_field(name)
    _require_valid_choice(name, request.value)
    session.set_field(name, request.value)
    return _record_response(session)


@router.post(
    "/sections/{list_kind}",
    response_model=RecordResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_section(
    list_kind: ListKind,
    request: Optional[SectionAppendRequest] = Body(None),
    session: EditorSession = Depends(get_editor_session),
):
    """Append a new subsection (blank unless a template is supplied)."""
    template = request.template if request else {}
    for name, value in template.items():
        _require_valid_choice(name, value, list_kind)

    try:
        session.append_section(list_kind, template)
    except UnknownFieldError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        )

    logger.info(
        "Added %s section #%d", list_kind.value, len(session.record.sections(list_kind))
    )
    return _record_response(session)


@router.put("/sections/{list_kind}/{index}/{name}", response_model=RecordResponse)
async def update_section_field(
    list_kind: ListKind,
    index: int,
    name: str,
    request: FieldUpdateRequest,
    session: EditorSession = Depends(get_editor_session),
):
    """Replace one field of the subsection at *index*."""
    _require_field(name, list_kind)
    _require_valid_choice(name, request.value, list_kind)

    try:
        session.set_section_field(list_kind, index, name, request.value)
    except IndexError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No {list_kind.value} section at index {index}.",
        )
    return _record_response(session)
