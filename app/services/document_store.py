"""
Saved-document persistence on top of the ``kv_store`` table.

Two keys are used:

``plaafp-documents``   JSON object mapping document id -> serialized Record
``plaafp-current-id``  id of the document that is currently open

Records serialize to plain nested JSON (camelCase keys, subsection lists as
arrays) and deserialize back to an equal Record; missing keys in older saves
come back as empty strings.
"""
from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Dict, Optional

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.database_models import KeyValueEntry
from app.models.record import Record
from app.services.errors import PersistenceError

logger = logging.getLogger(__name__)

DOCUMENTS_KEY = "plaafp-documents"
CURRENT_ID_KEY = "plaafp-current-id"


def serialize_record(record: Record) -> Dict[str, Any]:
    return record.model_dump(mode="json", by_alias=True)


def deserialize_record(data: Dict[str, Any]) -> Record:
    return Record.model_validate(data)


def new_document_id() -> str:
    return uuid.uuid4().hex


class DocumentStore:
    """Reads and writes saved documents for one database session."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Raw key-value access
    # ------------------------------------------------------------------

    async def _get(self, key: str) -> Optional[str]:
        try:
            result = await self.db.execute(
                select(KeyValueEntry).where(KeyValueEntry.key == key)
            )
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not read '{key}': {exc}") from exc
        entry = result.scalar_one_or_none()
        return entry.value if entry is not None else None

    async def _put(self, key: str, value: str) -> None:
        try:
            entry = await self.db.get(KeyValueEntry, key)
            if entry is None:
                self.db.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not write '{key}': {exc}") from exc

    async def _delete(self, key: str) -> None:
        try:
            await self.db.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not delete '{key}': {exc}") from exc

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def load_documents(self) -> Dict[str, Record]:
        """
        All saved documents.  A corrupt payload is logged and treated as an
        empty collection rather than failing the caller.
        """
        raw = await self._get(DOCUMENTS_KEY)
        if not raw:
            return {}
        try:
            payload = json.loads(raw)
            return {doc_id: deserialize_record(data) for doc_id, data in payload.items()}
        except (json.JSONDecodeError, AttributeError, ValidationError) as exc:
            logger.error("Failed to load saved documents: %s", exc)
            return {}

    async def save_documents(self, documents: Dict[str, Record]) -> None:
        payload = {doc_id: serialize_record(record) for doc_id, record in documents.items()}
        await self._put(DOCUMENTS_KEY, json.dumps(payload))
        logger.info("Saved %d document(s)", len(documents))

    async def save_document(self, doc_id: str, record: Record) -> Dict[str, Record]:
        documents = await self.load_documents()
        documents[doc_id] = record
        await self.save_documents(documents)
        return documents

    async def delete_document(self, doc_id: str) -> bool:
        documents = await self.load_documents()
        if doc_id not in documents:
            return False
        del documents[doc_id]
        await self.save_documents(documents)
        return True

    async def clear_documents(self) -> None:
        await self._delete(DOCUMENTS_KEY)
        await self._delete(CURRENT_ID_KEY)
        logger.info("All saved documents deleted")

    # ------------------------------------------------------------------
    # Current document id
    # ------------------------------------------------------------------

    async def get_current_id(self) -> Optional[str]:
        return await self._get(CURRENT_ID_KEY)

    async def set_current_id(self, doc_id: Optional[str]) -> None:
        if doc_id:
            await self._put(CURRENT_ID_KEY, doc_id)
        else:
            await self._delete(CURRENT_ID_KEY)
