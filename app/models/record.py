"""
The PLAAFP Record: the canonical structured document behind the form and the
preview.

Every entity is a frozen pydantic model so a mutation always produces a new
value.  Attributes are snake_case in Python and camelCase on the wire (the
same names the form client and the rendered preview use), e.g.
``student_name`` <-> ``studentName``.
"""
from __future__ import annotations

import dataclasses
import enum
from typing import Dict, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Constrained choices (validated at the input boundary, stored as plain str)
# ---------------------------------------------------------------------------

class DeficitType(str, enum.Enum):
    """How the student's deficits are measured."""

    UNSET = ""
    NORMATIVE = "normative"
    RELATIVE = "relative"


class AssessmentOutcome(str, enum.Enum):
    """State assessment result for one summary subject."""

    UNSET = ""
    PASSED = "passed"
    DID_NOT_PASS = "did not pass"


class SupportStatus(str, enum.Enum):
    """Whether special education support is received in a subject."""

    UNSET = ""
    RECEIVES = "receives"
    DOES_NOT_RECEIVE = "does not receive"


class ListKind(str, enum.Enum):
    """The two repeatable subsection lists of a Record."""

    ACADEMIC = "academic"
    SUMMARY = "summary"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------

_FROZEN = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
)


class AcademicSection(BaseModel):
    """One academic subject block of the report."""

    model_config = _FROZEN

    id: str
    subject: str = ""
    staar_proficient: str = ""
    staar_deficits: str = ""
    current_data: str = ""
    performance_comparison: str = ""
    no_progress_reason: str = ""
    reading_fluency: str = ""
    reading_comprehension: str = ""
    math_problem_solving: str = ""
    supports_performance: str = ""
    classroom_strengths: str = ""
    classroom_deficits: str = ""
    deficits_evidence: str = ""
    with_supports: str = ""
    without_supports: str = ""
    peer_comparison_grade_level: str = ""
    peer_comparison_student: str = ""
    benchmark_percentile: str = ""
    peer_benchmark_percentile: str = ""
    strengths_despite_deficits: str = ""
    critical_needs: str = ""
    independent_access_impact: str = ""


class PerformanceSummarySection(BaseModel):
    """One subject of the Summary of Performance."""

    model_config = _FROZEN

    id: str
    subject: str = ""
    passed_state_assessment: str = ""
    taks_score: str = ""
    raw_score: str = ""
    percent_correct: str = ""
    grade_in_subject: str = ""
    accommodations: str = ""
    needs: str = ""
    receives_special_ed_support: str = ""
    strengths: str = ""


Section = Union[AcademicSection, PerformanceSummarySection]


class Record(BaseModel):
    """A whole PLAAFP document."""

    model_config = _FROZEN

    student_name: str = ""
    grade: str = ""
    disabilities: str = ""
    subjects: str = ""
    cognitive_deficits: str = ""
    academic_deficits: str = ""
    disability_impact: str = ""
    deficit_type: str = ""
    special_ed_support: str = ""
    related_services: str = ""
    accommodations: str = ""
    academic_sections: Tuple[AcademicSection, ...] = ()
    performance_summary_sections: Tuple[PerformanceSummarySection, ...] = ()
    functional_strengths: str = ""
    functional_deficits: str = ""
    functional_data_source: str = ""
    functional_impact: str = ""
    transition_strengths: str = ""
    transition_support_needs: str = ""
    transition_independent_living: str = ""
    transition_schedules: str = ""
    transition_responsibility: str = ""
    transition_participation: str = ""
    transition_employment_goal: str = ""
    parent_employment_plan: str = ""
    parent_employment_goal: str = ""
    parent_living_plan: str = ""
    parent_name: str = ""

    def sections(self, list_kind: ListKind) -> Tuple[Section, ...]:
        if ListKind(list_kind) is ListKind.ACADEMIC:
            return self.academic_sections
        return self.performance_summary_sections


# ---------------------------------------------------------------------------
# Field name tables (wire name -> attribute name), scalar fields only
# ---------------------------------------------------------------------------

def _scalar_fields(model: Type[BaseModel], exclude: Tuple[str, ...]) -> Dict[str, str]:
    return {
        to_camel(name): name
        for name in model.model_fields
        if name not in exclude
    }


RECORD_FIELDS: Dict[str, str] = _scalar_fields(
    Record, ("academic_sections", "performance_summary_sections")
)

SECTION_FIELDS: Dict[ListKind, Dict[str, str]] = {
    ListKind.ACADEMIC: _scalar_fields(AcademicSection, ("id",)),
    ListKind.SUMMARY: _scalar_fields(PerformanceSummarySection, ("id",)),
}

SECTION_MODELS: Dict[ListKind, Type[BaseModel]] = {
    ListKind.ACADEMIC: AcademicSection,
    ListKind.SUMMARY: PerformanceSummarySection,
}

SECTION_LIST_ATTRS: Dict[ListKind, str] = {
    ListKind.ACADEMIC: "academic_sections",
    ListKind.SUMMARY: "performance_summary_sections",
}

# (list kind or None for top level, wire field name) -> allowed values
CHOICE_FIELDS: Dict[Tuple[Optional[ListKind], str], Type[enum.Enum]] = {
    (None, "deficitType"): DeficitType,
    (ListKind.SUMMARY, "passedStateAssessment"): AssessmentOutcome,
    (ListKind.SUMMARY, "receivesSpecialEdSupport"): SupportStatus,
}


# ---------------------------------------------------------------------------
# Locators
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class TopLevelField:
    """A flat field of the Record, e.g. ``studentName``."""

    name: str


@dataclasses.dataclass(frozen=True)
class SectionField:
    """A field of the subsection at ``index`` in one of the two lists."""

    list_kind: ListKind
    index: int
    name: str


Locator = Union[TopLevelField, SectionField]
