"""
Pydantic schemas for request/response validation.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict
from datetime import datetime

from app.models.record import ListKind, Record


# Record edits
class FieldUpdateRequest(BaseModel):
    """New value for one Record field."""

    value: str = ""


class SectionAppendRequest(BaseModel):
    """Optional initial values (wire names) for a new subsection."""

    template: Dict[str, str] = Field(default_factory=dict)


class RecordResponse(BaseModel):
    """The current Record plus the id of the saved document it belongs to."""

    document_id: Optional[str] = None
    record: Record


# Preview
class LocatedValue(BaseModel):
    """One rendered value and where it lives in the Record."""

    field: str
    list_kind: Optional[ListKind] = None
    index: Optional[int] = None
    text: str


class PreviewResponse(BaseModel):
    """Rendered preview markup and its locator projection."""

    html: str
    values: List[LocatedValue] = Field(default_factory=list)


class PreviewEditRequest(BaseModel):
    """Edited preview markup captured from the editable surface."""

    html: str


class PreviewEditResponse(BaseModel):
    changed: bool
    html: str
    record: Record


# Form catalog
class ChoiceOptionSchema(BaseModel):
    value: str
    label: str

    model_config = ConfigDict(from_attributes=True)


class FormFieldSchema(BaseModel):
    name: str
    label: str
    kind: str
    placeholder: str = ""
    options: List[ChoiceOptionSchema] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class FormStepSchema(BaseModel):
    title: str
    list_kind: Optional[ListKind] = None
    fields: List[FormFieldSchema]

    model_config = ConfigDict(from_attributes=True)


class FormCatalogResponse(BaseModel):
    steps: List[FormStepSchema]
    sample_student_names: List[str] = Field(default_factory=list)


# Saved documents
class SavedDocumentSummary(BaseModel):
    """One entry of the document picker."""

    id: str
    student_name: str
    display_name: str


class DocumentListResponse(BaseModel):
    current_id: Optional[str] = None
    documents: List[SavedDocumentSummary] = Field(default_factory=list)


class DocumentSaveResponse(BaseModel):
    id: str
    message: str = "Document saved!"


# AI assistant
class SuggestionRequest(BaseModel):
    """Ask the assistant for help with one field."""

    field: str = Field(..., min_length=1)
    label: Optional[str] = None
    list_kind: Optional[ListKind] = None
    index: Optional[int] = Field(None, ge=0)


class SuggestionResponse(BaseModel):
    field: str
    title: str
    content: str
    content_html: str


class ExtractionResponse(BaseModel):
    """Outcome of a screenshot extraction for one field."""

    field: str
    list_kind: Optional[ListKind] = None
    index: Optional[int] = None
    applied: bool
    value: Optional[str] = None
    message: str


# Health
class HealthCheckResponse(BaseModel):
    """Schema for health check response."""

    status: str
    database: str
    ollama: str
    timestamp: datetime
