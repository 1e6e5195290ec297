"""
Form catalog endpoint: steps, labels, input kinds and choice options.
"""
from fastapi import APIRouter

from app.models.schemas import FormCatalogResponse, FormStepSchema
from app.services.form_catalog import SAMPLE_STUDENT_NAMES, STEPS

router = APIRouter()


@router.get("/", response_model=FormCatalogResponse)
async def get_form_catalog():
    """Describe the guided form so clients can build their inputs from it."""
    return FormCatalogResponse(
        steps=[FormStepSchema.model_validate(step) for step in STEPS],
        sample_student_names=list(SAMPLE_STUDENT_NAMES),
    )
