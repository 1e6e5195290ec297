"""
SQLAlchemy ORM models for the PLAAFP Assistant database.

Saved documents live in a single key-value table, mirroring the browser
local-storage layout the form client uses: one key holds the JSON map of
document id -> Record, another holds the id of the open document.
"""
from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from app.database import Base


class KeyValueEntry(Base):
    """One key in the persistence key-value store."""

    __tablename__ = "kv_store"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<KeyValueEntry(key='{self.key}', size={len(self.value or '')})>"
