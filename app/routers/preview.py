"""
Live preview endpoints.

GET  /  — render the current Record as editable HTML (+ locator projection)
POST /  — merge an edited preview back into the Record
"""
import logging

from fastapi import APIRouter, Depends

from app.models.record import SectionField
from app.models.schemas import (
    LocatedValue,
    PreviewEditRequest,
    PreviewEditResponse,
    PreviewResponse,
)
from app.services.editor_session import EditorSession, get_editor_session
from app.services.renderer import project

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=PreviewResponse)
async def get_preview(session: EditorSession = Depends(get_editor_session)):
    """
    Render the preview.  ``values`` lists every located value in document
    order so clients can map DOM spans back to form inputs.
    """
    html = session.render()
    values = []
    for locator, text in project(session.record):
        if isinstance(locator, SectionField):
            values.append(LocatedValue(
                field=locator.name,
                list_kind=locator.list_kind,
                index=locator.index,
                text=text,
            ))
        else:
            values.append(LocatedValue(field=locator.name, text=text))
    return PreviewResponse(html=html, values=values)


@router.post("/", response_model=PreviewEditResponse)
async def edit_preview(
    request: PreviewEditRequest,
    session: EditorSession = Depends(get_editor_session),
):
    """
    Reconcile the edited preview with the Record.  Unparseable markup or
    unresolvable locators are ignored, so this never fails on content.
    """
    changed = session.apply_preview_edit(request.html)
    if changed:
        logger.info("Preview edit merged into record")
    return PreviewEditResponse(changed=changed, html=session.render(), record=session.record)
