"""
Saved document management endpoints.

GET    /           — saved documents + id of the open one
POST   /save       — save the open Record (new id on first save)
POST   /new        — discard the open Record and start a blank one
POST   /{id}/load  — open a saved document
DELETE /{id}       — delete one saved document
DELETE /           — delete every saved document
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.schemas import (
    DocumentListResponse,
    DocumentSaveResponse,
    RecordResponse,
    SavedDocumentSummary,
)
from app.services.document_store import DocumentStore, new_document_id
from app.services.editor_session import EditorSession, get_editor_session
from app.services.errors import PersistenceError

logger = logging.getLogger(__name__)

router = APIRouter()


def _persistence_failed(action: str, exc: Exception) -> HTTPException:
    logger.error("Failed to %s: %s", action, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Error {action}.",
    )


# ---------------------------------------------------------------------------
# List
# ---------------------------------------------------------------------------

@router.get("/", response_model=DocumentListResponse)
async def list_documents(
    db: AsyncSession = Depends(get_db),
    session: EditorSession = Depends(get_editor_session),
):
    """List saved documents by student name for the document picker."""
    try:
        documents = await DocumentStore(db).load_documents()
    except PersistenceError as exc:
        raise _persistence_failed("loading documents", exc)

    return DocumentListResponse(
        current_id=session.document_id,
        documents=[
            SavedDocumentSummary(
                id=doc_id,
                student_name=record.student_name,
                display_name=record.student_name or f"Document {doc_id}",
            )
            for doc_id, record in documents.items()
        ],
    )


# ---------------------------------------------------------------------------
# Save / new / load
# ---------------------------------------------------------------------------

@router.post("/save", response_model=DocumentSaveResponse)
async def save_document(
    db: AsyncSession = Depends(get_db),
    session: EditorSession = Depends(get_editor_session),
):
    """
    Save the open Record under its current id, minting one on first save.
    The in-memory Record stays authoritative even if the write fails.
    """
    if not session.record.student_name.strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Please enter a student name before saving.",
        )

    doc_id = session.document_id or new_document_id()
    session.document_id = doc_id

    store = DocumentStore(db)
    try:
        await store.save_document(doc_id, session.record)
        await store.set_current_id(doc_id)
    except PersistenceError as exc:
        raise _persistence_failed("saving document", exc)

    logger.info("Saved document %s (%s)", doc_id, session.record.student_name)
    return DocumentSaveResponse(id=doc_id)


@router.post("/new", response_model=RecordResponse)
async def new_document(
    db: AsyncSession = Depends(get_db),
    session: EditorSession = Depends(get_editor_session),
):
    """Start a blank document."""
    session.reset()
    try:
        await DocumentStore(db).set_current_id(None)
    except PersistenceError as exc:
        raise _persistence_failed("starting a new document", exc)
    return RecordResponse(document_id=None, record=session.record)


@router.post("/{doc_id}/load", response_model=RecordResponse)
async def load_document(
    doc_id: str,
    db: AsyncSession = Depends(get_db),
    session: EditorSession = Depends(get_editor_session),
):
    """Replace the open Record with a saved document."""
    store = DocumentStore(db)
    try:
        documents = await store.load_documents()
    except PersistenceError as exc:
        raise _persistence_failed("loading documents", exc)

    record = documents.get(doc_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Document {doc_id} not found.",
        )

    session.load(doc_id, record)
    try:
        await store.set_current_id(doc_id)
    except PersistenceError as exc:
        raise _persistence_failed("opening document", exc)
    return RecordResponse(document_id=doc_id, record=record)


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

@router.delete("/{doc_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    doc_id: str,
    db: AsyncSession = Depends(get_db),
    session: EditorSession = Depends(get_editor_session),
):
    """Delete one saved document; if it was open, start a blank one."""
    store = DocumentStore(db)
    was_open = session.document_id == doc_id
    try:
        deleted = await store.delete_document(doc_id)
        if deleted and was_open:
            await store.set_current_id(None)
    except PersistenceError as exc:
        raise _persistence_failed("deleting document", exc)

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Document {doc_id} not found.",
        )
    if was_open:
        session.reset()
    logger.info("Deleted document %s", doc_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
async def delete_all_documents(
    db: AsyncSession = Depends(get_db),
    session: EditorSession = Depends(get_editor_session),
):
    """Delete every saved document and start a blank one."""
    try:
        await DocumentStore(db).clear_documents()
    except PersistenceError as exc:
        raise _persistence_failed("deleting documents", exc)
    session.reset()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
