"""Database, domain and schema models for the PLAAFP Assistant."""
from app.models.database_models import KeyValueEntry
from app.models.record import (
    AcademicSection,
    AssessmentOutcome,
    DeficitType,
    ListKind,
    Locator,
    PerformanceSummarySection,
    Record,
    SectionField,
    SupportStatus,
    TopLevelField,
)
from app.models.schemas import (
    DocumentListResponse,
    ExtractionResponse,
    HealthCheckResponse,
    PreviewResponse,
    RecordResponse,
    SuggestionResponse,
)

__all__ = [
    # Database models
    "KeyValueEntry",
    # Record
    "Record",
    "AcademicSection",
    "PerformanceSummarySection",
    "DeficitType",
    "AssessmentOutcome",
    "SupportStatus",
    "ListKind",
    "Locator",
    "TopLevelField",
    "SectionField",
    # Pydantic schemas
    "RecordResponse",
    "PreviewResponse",
    "DocumentListResponse",
    "SuggestionResponse",
    "ExtractionResponse",
    "HealthCheckResponse",
]
