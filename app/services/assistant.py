"""
AI assistant service: field suggestions and screenshot extraction.

Uses Ollama's /api/generate endpoint: the text model for suggestions, the
vision model (``images`` = base64 list) for screenshot extraction.  Prompts are
module-level constants so they can be tuned without touching logic code.

The service never touches the Record itself.  Callers apply an extracted value
through the editor session, against whatever Record is current when the call
resolves.

Public API
----------
OllamaAssistantService.suggest(field, label, record)                      -> Suggestion
OllamaAssistantService.extract_from_image(image_b64, locator, label, rec) -> Optional[str]
OllamaAssistantService.check_health()                                    -> bool
"""
from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import List, Optional

import httpx

from app.config import settings
from app.models.record import ListKind, Locator, Record, SectionField
from app.services.errors import AssistantUnavailableError, MissingContextError
from app.utils.helpers import truncate_text

logger = logging.getLogger(__name__)

NOT_FOUND_SENTINEL = "information not found"


# ---------------------------------------------------------------------------
# Result dataclass
# ---------------------------------------------------------------------------

@dataclasses.dataclass
class Suggestion:
    """Returned by suggest() for display in the suggestion dialog."""

    field: str
    title: str
    content: str


# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

_SUGGESTION_PROMPT = """\
You are an AI assistant for special education teachers writing a PLAAFP document. \
For the field labelled "{label}", provide a helpful suggestion, example text, or a \
list of things to include. Also, briefly suggest where a teacher might find this \
information (e.g., student's cumulative folder, FIE report, parent interview). \
Format the response clearly using markdown for bolding and lists.\
"""

_IMPACT_PROMPT = """\
Based on a student's cognitive deficits in "{cognitive}" and academic deficits in \
"{academic}", write a concise, 1-2 sentence impact statement for a PLAAFP document. \
This statement should describe how these deficits affect the student's ability to \
access and progress in the general education curriculum. The statement should be \
ready to be copied directly into the document. For example: "difficulty processing \
auditory information and challenges with reading fluency affect the student's \
ability to keep pace with classroom discussions and independently complete \
grade-level reading assignments."\
"""

_EXTRACT_PROMPT = """\
I've pasted a screenshot. I am trying to fill out the "{label}" field in a student's \
PLAAFP document. Please extract only the specific information relevant to this field \
from the image. Respond with only the extracted text, ready to be placed in the \
document. If the information is not present, respond with "Information not found in image."\
"""

_STAAR_AREAS_PROMPT = """\
I've pasted a screenshot of a student's STAAR test results. Please analyze the image \
and identify the two areas where the student showed the {which}. Respond with only the \
names of these two areas, separated by a comma. For example: "{example}". If you cannot \
determine this from the image, respond with "Information not found in image."\
"""

_SCORE_PROMPT = """\
I've pasted a screenshot of a student's test results. For the subject "{subject}", \
please find the most recent test score and extract only the {score_type}. Respond with \
only the number or percentage. For example, if the scale score is '1452', respond with \
'1452'. If the raw score is '35/52', respond with '35/52'. If the percent correct is \
'67%', respond with '67%'. If you cannot find this information, respond with \
"Information not found in image."\
"""

_SCORE_TYPES = {
    "taksScore": "scale score (this is usually a 4-digit number)",
    "rawScore": 'raw score (this is usually a smaller number, like "35/52")',
    "percentCorrect": 'percent correct (e.g., "67%")',
}

_MISSING_DEFICITS = (
    "Please fill in the 'Cognitive Deficits' and/or 'Academic Deficits' fields "
    "first to get a tailored impact statement."
)


def is_not_found(text: str) -> bool:
    """True when the model reported that the image held nothing usable."""
    return NOT_FOUND_SENTINEL in text.lower()


# Shared across service instances so the cap holds process-wide.
_semaphore: Optional[asyncio.Semaphore] = None


def _llm_semaphore() -> asyncio.Semaphore:
    global _semaphore
    if _semaphore is None:
        _semaphore = asyncio.Semaphore(settings.LLM_MAX_CONCURRENT)
    return _semaphore


# ---------------------------------------------------------------------------
# Main service class
# ---------------------------------------------------------------------------

class OllamaAssistantService:
    """Suggestion and extraction calls via Ollama /api/generate."""

    LLM_TIMEOUT: float = float(settings.OLLAMA_TIMEOUT)

    SUGGESTION_PROMPT = _SUGGESTION_PROMPT
    IMPACT_PROMPT = _IMPACT_PROMPT
    EXTRACT_PROMPT = _EXTRACT_PROMPT
    STAAR_AREAS_PROMPT = _STAAR_AREAS_PROMPT
    SCORE_PROMPT = _SCORE_PROMPT

    def __init__(self) -> None:
        self.base_url = settings.OLLAMA_BASE_URL
        self.model = settings.OLLAMA_LLM_MODEL
        self.vision_model = settings.OLLAMA_VISION_MODEL
        self.timeout = httpx.Timeout(self.LLM_TIMEOUT, connect=10.0)

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------

    async def suggest(self, field: str, label: str, record: Record) -> Suggestion:
        """
        Ask the model for guidance on *field*.

        ``disabilityImpact`` gets a tailored impact statement built from the
        student's deficits and raises ``MissingContextError`` when neither
        deficit field has been filled in.
        """
        if field == "disabilityImpact":
            cognitive = record.cognitive_deficits.strip()
            academic = record.academic_deficits.strip()
            if not cognitive and not academic:
                raise MissingContextError("Missing Information", _MISSING_DEFICITS)
            prompt = self.IMPACT_PROMPT.format(
                cognitive=cognitive or "none specified",
                academic=academic or "none specified",
            )
            title = "Generated Impact Statement"
        else:
            prompt = self.SUGGESTION_PROMPT.format(label=label)
            title = f"Suggestion for {label}"

        content = await self._generate(prompt, self.model)
        logger.info("suggest: %s → %d chars", field, len(content))
        return Suggestion(field=field, title=title, content=content)

    # ------------------------------------------------------------------
    # Screenshot extraction
    # ------------------------------------------------------------------

    def extraction_prompt(self, locator: Locator, label: str, record: Record) -> str:
        """Field-specific extraction prompt for *locator*."""
        if locator.name == "staarProficient":
            return self.STAAR_AREAS_PROMPT.format(
                which="highest proficiency",
                example="Reading Comprehension, Algebraic Reasoning",
            )
        if locator.name == "staarDeficits":
            return self.STAAR_AREAS_PROMPT.format(
                which="biggest deficit or lowest performance",
                example="Editing and Revising, Data Analysis",
            )
        if (
            isinstance(locator, SectionField)
            and locator.list_kind is ListKind.SUMMARY
            and locator.name in _SCORE_TYPES
        ):
            sections = record.performance_summary_sections
            subject = ""
            if 0 <= locator.index < len(sections):
                subject = sections[locator.index].subject.strip()
            return self.SCORE_PROMPT.format(
                subject=subject or "the relevant subject",
                score_type=_SCORE_TYPES[locator.name],
            )
        return self.EXTRACT_PROMPT.format(label=label)

    async def extract_from_image(
        self,
        image_b64: str,
        locator: Locator,
        label: str,
        record: Record,
    ) -> Optional[str]:
        """
        Extract the value for *locator* from a base64-encoded screenshot.

        Returns the trimmed text, or ``None`` when the model found nothing
        usable (empty reply or the "information not found" sentinel).
        """
        prompt = self.extraction_prompt(locator, label, record)
        text = (await self._generate(prompt, self.vision_model, images=[image_b64])).strip()

        if not text or is_not_found(text):
            logger.info("extract_from_image: nothing found for %s", locator.name)
            return None

        logger.info("extract_from_image: %s ← %r", locator.name, truncate_text(text, 80))
        return text

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def check_health(self) -> bool:
        """Return ``True`` if Ollama is reachable and returns HTTP 200."""
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                resp = await client.get(f"{self.base_url}/api/tags")
                return resp.status_code == 200
        except Exception as exc:
            logger.error("Ollama health check failed: %s", exc)
            return False

    # ------------------------------------------------------------------
    # Core LLM caller
    # ------------------------------------------------------------------

    async def _generate(
        self,
        prompt: str,
        model: str,
        images: Optional[List[str]] = None,
    ) -> str:
        """
        POST to Ollama /api/generate and return the response text.

        Raises ``AssistantUnavailableError`` on timeout, connection failure or
        a non-200 response.
        """
        payload = {"model": model, "prompt": prompt, "stream": False}
        if images:
            payload["images"] = images

        async with _llm_semaphore():
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.post(f"{self.base_url}/api/generate", json=payload)
            except httpx.TimeoutException as exc:
                logger.error("_generate: request timed out after %.0f s", self.LLM_TIMEOUT)
                raise AssistantUnavailableError("The AI service timed out.") from exc
            except httpx.HTTPError as exc:
                logger.error("_generate: connection error — %s", exc)
                raise AssistantUnavailableError("The AI service could not be reached.") from exc

        if resp.status_code != 200:
            logger.error(
                "_generate: Ollama returned HTTP %d: %s",
                resp.status_code,
                resp.text[:300],
            )
            raise AssistantUnavailableError(f"The AI service returned HTTP {resp.status_code}.")

        return resp.json().get("response", "")


def get_assistant_service() -> OllamaAssistantService:
    """FastAPI dependency returning an assistant service instance."""
    return OllamaAssistantService()
