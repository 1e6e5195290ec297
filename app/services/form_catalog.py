"""
Static description of the guided form: steps, field labels, input kinds and
the allowed values of constrained-choice fields.

Labels double as the context the AI assistant is given for a field, and the
choice tables are the single place enumerated values are validated before they
reach the Record Store.
"""
from __future__ import annotations

import dataclasses
from typing import Dict, List, Optional, Tuple

from app.models.record import (
    CHOICE_FIELDS,
    RECORD_FIELDS,
    SECTION_FIELDS,
    AssessmentOutcome,
    DeficitType,
    ListKind,
    SupportStatus,
)

SAMPLE_STUDENT_NAMES: Tuple[str, ...] = (
    "Student Alpha",
    "Student Beta",
    "Student Gamma",
    "Student Delta",
    "Student Epsilon",
)


@dataclasses.dataclass(frozen=True)
class ChoiceOption:
    value: str
    label: str


@dataclasses.dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    kind: str = "text"  # text | textarea | select
    placeholder: str = ""
    options: Tuple[ChoiceOption, ...] = ()


@dataclasses.dataclass(frozen=True)
class FormStep:
    title: str
    fields: Tuple[FieldSpec, ...]
    list_kind: Optional[ListKind] = None


def _select(name: str, label: str, options: Tuple[ChoiceOption, ...]) -> FieldSpec:
    return FieldSpec(name, label, "select", options=options)


def _area(name: str, label: str, placeholder: str = "") -> FieldSpec:
    return FieldSpec(name, label, "textarea", placeholder)


STEPS: Tuple[FormStep, ...] = (
    FormStep("Introductory", (
        _select("studentName", "Student Name",
                tuple(ChoiceOption(n, n) for n in SAMPLE_STUDENT_NAMES)),
        FieldSpec("grade", "Grade"),
        FieldSpec("disabilities", "Disability(ies)"),
        FieldSpec("subjects", "Subjects/Courses"),
        FieldSpec("cognitiveDeficits", "Cognitive Deficits"),
        FieldSpec("academicDeficits", "Academic Deficits"),
        _area("disabilityImpact", "Impact of Disability"),
        _select("deficitType", "Deficit Type", (
            ChoiceOption(DeficitType.NORMATIVE.value, "Normative - compared to same-age peers"),
            ChoiceOption(DeficitType.RELATIVE.value, "Relative - compared to student's own abilities"),
        )),
        FieldSpec("specialEdSupport", "Special Education/Resource Support"),
        FieldSpec("relatedServices", "Related Services"),
        FieldSpec("accommodations", "Accommodations"),
    )),
    FormStep("Academics", (
        FieldSpec("subject", "Subject/Course"),
        FieldSpec("staarProficient", "STAAR Proficient Areas (TEKS)"),
        FieldSpec("staarDeficits", "STAAR Deficit Areas (TEKS)"),
        FieldSpec("readingFluency", "Reading Fluency (Score/Percentile)"),
        FieldSpec("readingComprehension", "Reading Comprehension (Score/Percentile)"),
        FieldSpec("mathProblemSolving", "Math Problem-Solving (Score/Percentile)"),
        _area("classroomStrengths", "Classroom Strengths"),
        _area("classroomDeficits", "Classroom Deficits"),
        _area("deficitsEvidence", "Evidence of Deficits"),
        _area("criticalNeeds", "Critical Areas of Need"),
    ), ListKind.ACADEMIC),
    FormStep("Functional", (
        FieldSpec("functionalDataSource", "Data Source(s)",
                  placeholder="e.g., teacher information, informal observation, checklists"),
        _area("functionalStrengths", "Functional Strengths"),
        _area("functionalDeficits", "Functional Deficits & Data",
              "Describe deficits with data (frequency, duration, intensity)"),
        _area("functionalImpact", "Impact on Progress"),
    )),
    FormStep("Transition", (
        FieldSpec("transitionStrengths", "Strengths (Life Skills, Community)"),
        FieldSpec("transitionSupportNeeds", "Support Needs"),
        FieldSpec("transitionIndependentLiving", "Independent Living Skills"),
        FieldSpec("transitionSchedules", "Follows Schedules (visual/verbal)"),
        FieldSpec("transitionEmploymentGoal", "Post-High School Employment Goal"),
        FieldSpec("parentName", "Parent Name(s)"),
        FieldSpec("parentEmploymentPlan", "Parent's Employment Plan (full/part-time)"),
        FieldSpec("parentEmploymentGoal", "Parent's Desired Employment Area"),
        FieldSpec("parentLivingPlan", "Parent's Post-Education Living Plan"),
    )),
    FormStep("Summary", (
        FieldSpec("subject", "Subject"),
        _select("passedStateAssessment", "State Assessment Outcome", (
            ChoiceOption(AssessmentOutcome.PASSED.value, "Passed"),
            ChoiceOption(AssessmentOutcome.DID_NOT_PASS.value, "Did not pass"),
        )),
        FieldSpec("taksScore", "TAKS/STAAR Scale Score"),
        FieldSpec("rawScore", "Raw Score"),
        FieldSpec("percentCorrect", "Percent Correct"),
        FieldSpec("gradeInSubject", "Grade in Subject"),
        _area("accommodations", "Accommodations / Modifications / Assistive Technology"),
        _area("needs", "Needs due to disability"),
        _select("receivesSpecialEdSupport", "Receives Special Education Support", (
            ChoiceOption(SupportStatus.RECEIVES.value, "Receives"),
            ChoiceOption(SupportStatus.DOES_NOT_RECEIVE.value, "Does not receive"),
        )),
        _area("strengths", "PLAAFP Strengths for Subject"),
    ), ListKind.SUMMARY),
)

_LABELS: Dict[Tuple[Optional[ListKind], str], str] = {
    (step.list_kind, spec.name): spec.label
    for step in STEPS
    for spec in step.fields
}


def label_for(name: str, list_kind: Optional[ListKind] = None) -> str:
    """Form label of a field, falling back to the wire name."""
    return _LABELS.get((list_kind, name), name)


def is_known_field(name: str, list_kind: Optional[ListKind] = None) -> bool:
    if list_kind is None:
        return name in RECORD_FIELDS
    return name in SECTION_FIELDS[ListKind(list_kind)]


def validate_choice(name: str, value: str, list_kind: Optional[ListKind] = None) -> None:
    """
    Raise ``ValueError`` if *name* is a constrained-choice field and *value*
    is not one of its allowed values.  Free-text fields accept anything.
    """
    choices = CHOICE_FIELDS.get((list_kind, name))
    if choices is None:
        return
    allowed: List[str] = [member.value for member in choices]
    if value not in allowed:
        raise ValueError(
            f"'{value}' is not a valid value for {name}; expected one of "
            + ", ".join(repr(v) for v in allowed)
        )
