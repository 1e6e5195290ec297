"""
In-memory singleton holding the document currently being edited.

All mutations replace ``record`` wholesale with a value produced by the pure
Record Store functions.  Handlers run on a single event loop and never await
between reading and replacing the Record, so no two mutations interleave.
Async work (AI calls) reads ``record`` again when it resolves rather than
keeping a snapshot.

Usage
-----
    from app.services.editor_session import editor_session

    editor_session.set_field("studentName", "Jordan")
    html = editor_session.render()
    changed = editor_session.apply_preview_edit(edited_html)
"""
from __future__ import annotations

import logging
from typing import Mapping, Optional

from app.models.record import ListKind, Locator, Record
from app.services import record_store
from app.services.document_store import DocumentStore
from app.services.reconciler import reconcile
from app.services.renderer import render_html

logger = logging.getLogger(__name__)


class EditorSession:
    """The open document and its last rendered preview."""

    def __init__(self) -> None:
        self.record: Record = record_store.new_record()
        self.document_id: Optional[str] = None
        self.last_html: str = ""
        self.last_rendered: Optional[Record] = None

    # ------------------------------------------------------------------
    # Whole-document lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> Record:
        """Discard the open document and start a blank one."""
        self.record = record_store.new_record()
        self.document_id = None
        self.last_html = ""
        self.last_rendered = None
        return self.record

    def load(self, document_id: str, record: Record) -> Record:
        self.record = record
        self.document_id = document_id
        self.last_html = ""
        self.last_rendered = None
        logger.info("Opened document %s", document_id)
        return self.record

    # ------------------------------------------------------------------
    # Field edits
    # ------------------------------------------------------------------

    def set_field(self, name: str, value: str) -> Record:
        self.record = record_store.set_field(self.record, name, value)
        return self.record

    def set_section_field(self, list_kind: ListKind, index: int, name: str, value: str) -> Record:
        self.record = record_store.set_section_field(self.record, list_kind, index, name, value)
        return self.record

    def append_section(self, list_kind: ListKind, template: Optional[Mapping[str, str]] = None) -> Record:
        self.record = record_store.append_section(self.record, list_kind, template)
        return self.record

    def apply(self, locator: Locator, value: str) -> Record:
        self.record = record_store.apply_value(self.record, locator, value)
        return self.record

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    def render(self) -> str:
        self.last_rendered = self.record
        self.last_html = render_html(self.record)
        return self.last_html

    def apply_preview_edit(self, markup: str) -> bool:
        """
        Merge an edited preview into the Record.  Returns True if it changed.

        The markup is diffed against the Record it was rendered from, so form
        edits made since that render survive.
        """
        if markup == self.last_html:
            return False
        rendered = self.last_rendered if self.last_rendered is not None else self.record
        updated = reconcile(rendered, markup, self.record)
        if updated is self.record:
            return False
        self.record = updated
        return True


editor_session = EditorSession()


def get_editor_session() -> EditorSession:
    """FastAPI dependency returning the process-wide editor session."""
    return editor_session


async def restore_session(session: EditorSession, store: DocumentStore) -> None:
    """
    Reopen the document that was current when the server last stopped.  A
    stale current id (pointing at a deleted document) is cleared.
    """
    documents = await store.load_documents()
    current_id = await store.get_current_id()

    if current_id and current_id in documents:
        session.load(current_id, documents[current_id])
        return

    session.reset()
    if current_id:
        logger.warning("Current document %s no longer exists — starting blank", current_id)
        await store.set_current_id(None)
