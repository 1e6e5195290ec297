"""
AI assistant endpoints.

POST /suggestion  — suggestion text for one field
POST /extract     — pull a field value out of a pasted screenshot and apply it
"""
from __future__ import annotations

import base64
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from app.config import settings
from app.models.record import ListKind, Locator, SectionField, TopLevelField
from app.models.schemas import ExtractionResponse, SuggestionRequest, SuggestionResponse
from app.services.assistant import OllamaAssistantService, get_assistant_service
from app.services.editor_session import EditorSession, get_editor_session
from app.services.errors import AssistantUnavailableError, MissingContextError
from app.services.form_catalog import is_known_field, label_for, validate_choice
from app.services.record_store import read_value
from app.utils.helpers import format_suggestion_html

logger = logging.getLogger(__name__)

router = APIRouter()

_SUGGESTION_FAILED = (
    "Sorry, I couldn't get a suggestion at this time. "
    "Please ensure the AI service is running and the model is available."
)
_EXTRACTION_FAILED = (
    "Sorry, I couldn't analyze the image at this time. "
    "Please ensure the AI service is running and the vision model is available."
)
_NOTHING_FOUND = "Could not find relevant information for that field in the image."


def _resolve_locator(
    field: str,
    list_kind: Optional[ListKind],
    index: Optional[int],
    session: EditorSession,
) -> Locator:
    """Build the target locator and check it resolves against the current Record."""
    if (list_kind is None) != (index is None):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="list_kind and index must be given together.",
        )
    if not is_known_field(field, list_kind):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown field '{field}'.",
        )

    locator: Locator = (
        SectionField(ListKind(list_kind), index, field)
        if list_kind is not None
        else TopLevelField(field)
    )
    if read_value(session.record, locator) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No {list_kind.value} section at index {index}.",
        )
    return locator


# ---------------------------------------------------------------------------
# POST /suggestion
# ---------------------------------------------------------------------------

@router.post("/suggestion", response_model=SuggestionResponse)
async def get_suggestion(
    request: SuggestionRequest,
    session: EditorSession = Depends(get_editor_session),
    assistant: OllamaAssistantService = Depends(get_assistant_service),
):
    """
    Ask the assistant about one field.  The Record is never modified here;
    the user copies what they want into the form.
    """
    _resolve_locator(request.field, request.list_kind, request.index, session)
    label = request.label or label_for(request.field, request.list_kind)

    try:
        suggestion = await assistant.suggest(request.field, label, session.record)
    except MissingContextError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        )
    except AssistantUnavailableError as exc:
        logger.error("Suggestion for %s failed: %s", request.field, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=_SUGGESTION_FAILED,
        )

    return SuggestionResponse(
        field=suggestion.field,
        title=suggestion.title,
        content=suggestion.content,
        content_html=format_suggestion_html(suggestion.content),
    )


# ---------------------------------------------------------------------------
# POST /extract
# ---------------------------------------------------------------------------

@router.post("/extract", response_model=ExtractionResponse)
async def extract_from_image(
    image: UploadFile = File(...),
    field: str = Form(...),
    label: Optional[str] = Form(None),
    list_kind: Optional[ListKind] = Form(None),
    index: Optional[int] = Form(None),
    session: EditorSession = Depends(get_editor_session),
    assistant: OllamaAssistantService = Depends(get_assistant_service),
):
    """
    Extract the value for one field from a pasted screenshot.

    The extracted text is applied to the Record that is current when the AI
    call returns, through the same path as a manual edit.  A late response
    overwrites whatever the field holds at that point.
    """
    locator = _resolve_locator(field, list_kind, index, session)
    label = label or label_for(field, list_kind)

    if image.content_type not in settings.SUPPORTED_IMAGE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Unsupported image type '{image.content_type}'. "
                f"Accepted: {', '.join(settings.SUPPORTED_IMAGE_TYPES)}"
            ),
        )

    data = await image.read()
    if not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The pasted image is empty.",
        )
    if len(data) > settings.MAX_IMAGE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Image exceeds the {settings.MAX_IMAGE_SIZE // (1024 * 1024)} MB size limit.",
        )

    image_b64 = base64.b64encode(data).decode("ascii")
    try:
        text = await assistant.extract_from_image(image_b64, locator, label, session.record)
    except AssistantUnavailableError as exc:
        logger.error("Image extraction for %s failed: %s", field, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=_EXTRACTION_FAILED,
        )

    response = ExtractionResponse(
        field=field,
        list_kind=list_kind,
        index=index,
        applied=False,
        message=_NOTHING_FOUND,
    )
    if text is None:
        return response

    try:
        validate_choice(field, text, list_kind)
        session.apply(locator, text)
    except ValueError as exc:
        response.message = str(exc)
        return response
    except IndexError:
        response.message = "The section this value belongs to no longer exists."
        return response

    response.applied = True
    response.value = text
    response.message = f"Filled in {label}."
    return response
