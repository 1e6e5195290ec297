"""
Template renderer: Record -> rich document -> HTML preview.

The document is built once as an ordered sequence of blocks made of plain
text runs and *slots*.  A slot is a value taken from the Record together with
the locator it came from.  The same structure drives two consumers:

- ``render_html`` turns it into the editable preview markup, wrapping every
  slot in ``<span class="editable-field" data-field=... [data-index=...
  data-section-type=...]>``;
- ``project`` flattens it into ``(locator, text)`` pairs, which is what the
  reconciler compares edited markup against.

Rendering is deterministic and total: any well-formed Record renders, and
empty fields render as ``(placeholder)`` text.
"""
from __future__ import annotations

import dataclasses
import html
from typing import Iterator, List, Tuple, Union

from app.models.record import (
    AcademicSection,
    ListKind,
    Locator,
    PerformanceSummarySection,
    Record,
    SectionField,
    TopLevelField,
)

EDITABLE_CLASS = "editable-field"

STUDENT_NAME_PLACEHOLDER = "______ (student name)"
PARENT_NAME_PLACEHOLDER = "______ (parent name)"
POSSESSIVE_PLACEHOLDER = "______'s"
PRONOUN = "he/she"
DEFICIT_TYPE_PLACEHOLDER = "☐ normative ☐ relative"


# ---------------------------------------------------------------------------
# Document structure
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class Slot:
    """A Record value placed in the document, tagged with where it came from."""

    locator: Locator
    text: str


Run = Union[str, Slot]


@dataclasses.dataclass(frozen=True)
class Block:
    kind: str  # "heading" | "paragraph"
    runs: Tuple[Run, ...]

    def plain_text(self) -> str:
        return "".join(r.text if isinstance(r, Slot) else r for r in self.runs)


@dataclasses.dataclass(frozen=True)
class RichDocument:
    blocks: Tuple[Block, ...]

    def slots(self) -> Iterator[Slot]:
        for block in self.blocks:
            for run in block.runs:
                if isinstance(run, Slot):
                    yield run

    def plain_text(self) -> str:
        return "\n".join(block.plain_text() for block in self.blocks)


def _heading(text: str) -> Block:
    return Block("heading", (text,))


def _paragraph(*runs: Run) -> Block:
    return Block("paragraph", tuple(runs))


# ---------------------------------------------------------------------------
# Substitution helpers
# ---------------------------------------------------------------------------

def fill(value: str, placeholder: str) -> str:
    """Trimmed value, or ``(placeholder)`` when the trimmed value is empty."""
    value = (value or "").strip()
    return value if value else f"({placeholder})"


def pronoun(student_name: str, sentence_start: bool = False) -> str:
    # Never inferred from the name.
    return "He/She" if sentence_start else PRONOUN


def possessive(student_name: str) -> str:
    name = (student_name or "").strip()
    return f"{name}'s" if name else POSSESSIVE_PLACEHOLDER


def _top(name: str, text: str) -> Slot:
    return Slot(TopLevelField(name), text)


def _sec(list_kind: ListKind, index: int, name: str, text: str) -> Slot:
    return Slot(SectionField(list_kind, index, name), text)


# ---------------------------------------------------------------------------
# Document assembly
# ---------------------------------------------------------------------------

def _intro_blocks(r: Record, name: str) -> List[Block]:
    deficit_type = r.deficit_type.strip()
    deficit_text = deficit_type[:1].upper() + deficit_type[1:] if deficit_type else DEFICIT_TYPE_PLACEHOLDER

    return [
        _heading("Introductory Paragraph"),
        _paragraph(
            _top("studentName", name), " is a ",
            _top("grade", fill(r.grade, "grade")),
            " grade student diagnosed with a ",
            _top("disabilities", fill(r.disabilities, "disability(ies)")),
            f" disability(ies). {name} is currently receiving enrolled grade-level instruction in ",
            _top("subjects", fill(r.subjects, "subjects/courses")),
            f" in the general education classroom. {possessive(r.student_name)} full individual "
            f"evaluation indicates that {pronoun(r.student_name)} has cognitive deficits in ",
            _top("cognitiveDeficits", fill(r.cognitive_deficits, "cognitive areas")),
            " and academic deficits in ",
            _top("academicDeficits", fill(r.academic_deficits, "academic areas")),
            ".",
        ),
        _paragraph(
            "The student’s disability affects their ability to ",
            _top("disabilityImpact", fill(r.disability_impact, "describe impact on access/progress")),
            f". These deficits are noted as {deficit_text} according to cognitive and achievement assessments.",
        ),
        _paragraph(
            f"Currently, {name} receives ",
            _top("specialEdSupport", fill(r.special_ed_support, "special education/resource support")),
            " and ",
            _top("relatedServices", fill(r.related_services, "related services")),
            " with accommodations including ",
            _top("accommodations", fill(r.accommodations, "list of accommodations")),
            ".",
        ),
    ]


def _academic_blocks(r: Record, name: str, index: int, s: AcademicSection) -> List[Block]:
    kind = ListKind.ACADEMIC
    subject_title = s.subject.strip() or f"(Subject {index + 1})"

    return [
        _heading(f"Academics: {subject_title}"),
        _paragraph(
            "On the spring STAAR ",
            _sec(kind, index, "subject", fill(s.subject, "subject/course")),
            f" assessment, {name} was relatively proficient in ",
            _sec(kind, index, "staarProficient", fill(s.staar_proficient, "TEKS Student Expectations")),
            f". {name} demonstrated deficits in ",
            _sec(kind, index, "staarDeficits", fill(s.staar_deficits, "Student Essential Outcome or TEKS")),
            ".",
        ),
        _paragraph(
            f"Baseline data shows that {name} performs at ",
            _sec(kind, index, "readingFluency", fill(s.reading_fluency, "score/percentile")),
            " in reading fluency, ",
            _sec(kind, index, "readingComprehension", fill(s.reading_comprehension, "score/percentile")),
            " in reading comprehension, and ",
            _sec(kind, index, "mathProblemSolving", fill(s.math_problem_solving, "score/percentile")),
            " in math problem-solving.",
        ),
        _paragraph(
            f"In the classroom setting, {name} is able to ",
            _sec(kind, index, "classroomStrengths", fill(s.classroom_strengths, "strengths")),
            f". However, {pronoun(r.student_name)} demonstrates deficits in the classroom in ",
            _sec(kind, index, "classroomDeficits",
                 fill(s.classroom_deficits, "needs—aligned with STAAR weak areas")),
            ", as evidenced by ",
            _sec(kind, index, "deficitsEvidence", fill(s.deficits_evidence, "work samples, CBM, rubrics")),
            ".",
        ),
        _paragraph(
            "Critical areas of need remain ",
            _sec(kind, index, "criticalNeeds", fill(s.critical_needs, "area")),
            ", which affect independent access to the grade-level curriculum.",
        ),
    ]


def _functional_blocks(r: Record, name: str) -> List[Block]:
    return [
        _heading("Functional"),
        _paragraph(
            "According to ",
            _top("functionalDataSource",
                 fill(r.functional_data_source, "teacher information, observation, etc.")),
            f", {name} has strengths in ",
            _top("functionalStrengths", fill(r.functional_strengths, "functional strengths")),
            f". However, according to the same sources, {name} has deficits in ",
            _top("functionalDeficits", fill(r.functional_deficits, "functional deficits and data")),
            ". At this time, these functional deficits are negatively impacting "
            f"{possessive(r.student_name)} rate of progress by ",
            _top("functionalImpact", fill(r.functional_impact, "describe impact")),
            ".",
        ),
    ]


def _transition_blocks(r: Record, name: str) -> List[Block]:
    parent = r.parent_name.strip() or PARENT_NAME_PLACEHOLDER

    return [
        _heading("Transition (Secondary)"),
        _paragraph(
            f"According to teacher survey and classroom observation, {name} was relatively proficient in ",
            _top("transitionStrengths",
                 fill(r.transition_strengths, "strengths - Life Skills, Community experiences, etc.")),
            ". In order to progress in independent living, employment, post-secondary educational "
            f"training, and community experiences {name} will need support in ",
            _top("transitionSupportNeeds", fill(r.transition_support_needs, "support areas")),
            ".",
        ),
        _paragraph(
            f"{name} would like to work in the ",
            _top("transitionEmploymentGoal", fill(r.transition_employment_goal, "area of employment")),
            " after high school.",
        ),
        _paragraph(
            _top("parentName", parent),
            " plans for him/her to work ",
            _top("parentEmploymentPlan", fill(r.parent_employment_plan, "full or part")),
            " time when he/she graduates. ",
            _top("parentName", parent),
            f" would like to see {name} work in ",
            _top("parentEmploymentGoal", fill(r.parent_employment_goal, "employment area")),
            " industry after their educational career. ",
            _top("parentName", parent),
            f" is planning for {name} to live ",
            _top("parentLivingPlan", fill(r.parent_living_plan, "with a friend / independently / at home")),
            " after educational career.",
        ),
    ]


def _summary_block(r: Record, name: str, index: int, s: PerformanceSummarySection) -> Block:
    kind = ListKind.SUMMARY
    subject = fill(s.subject, "subject")

    return _paragraph(
        f"{name} ",
        _sec(kind, index, "passedStateAssessment", fill(s.passed_state_assessment, "passed/did not pass")),
        " the ",
        _sec(kind, index, "subject", subject),
        " state assessment with a performance of ",
        _sec(kind, index, "taksScore", fill(s.taks_score, "TAKS score")),
        ", obtaining a raw score of ",
        _sec(kind, index, "rawScore", fill(s.raw_score, "raw score")),
        " which was ",
        _sec(kind, index, "percentCorrect", fill(s.percent_correct, "% correct")),
        f" correct. {name} is currently making or made a ",
        _sec(kind, index, "gradeInSubject", fill(s.grade_in_subject, "grade in subject")),
        f". {name} requires accommodations/modifications/assistive technology of ",
        _sec(kind, index, "accommodations", fill(s.accommodations, "accommodations/assist tech")),
        " due to his/her disability and ",
        _sec(kind, index, "needs", fill(s.needs, "needs")),
        f". {pronoun(r.student_name, sentence_start=True)} ",
        _sec(kind, index, "receivesSpecialEdSupport",
             fill(s.receives_special_ed_support, "receives/does not receive")),
        " special education support in ",
        _sec(kind, index, "subject", subject),
        ". In ",
        _sec(kind, index, "subject", subject),
        f" {name} exhibits skills of ",
        _sec(kind, index, "strengths", fill(s.strengths, "PLAAFP strengths for subject")),
        ".",
    )


def build_document(record: Record) -> RichDocument:
    """Assemble the full report for *record*."""
    name = record.student_name.strip() or STUDENT_NAME_PLACEHOLDER

    blocks: List[Block] = _intro_blocks(record, name)
    for index, section in enumerate(record.academic_sections):
        blocks.extend(_academic_blocks(record, name, index, section))
    blocks.extend(_functional_blocks(record, name))
    blocks.extend(_transition_blocks(record, name))

    if record.performance_summary_sections:
        blocks.append(_heading("Summary of Performance"))
        for index, section in enumerate(record.performance_summary_sections):
            blocks.append(_summary_block(record, name, index, section))

    return RichDocument(tuple(blocks))


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------

def project(record: Record) -> List[Tuple[Locator, str]]:
    """Every rendered value of *record* with its locator, in document order."""
    return [(slot.locator, slot.text) for slot in build_document(record).slots()]


def _escape(text: str) -> str:
    return html.escape(text, quote=False)


def _slot_html(slot: Slot) -> str:
    loc = slot.locator
    attrs = f'data-field="{html.escape(loc.name)}"'
    if isinstance(loc, SectionField):
        attrs += f' data-index="{loc.index}" data-section-type="{loc.list_kind.value}"'
    return f'<span class="{EDITABLE_CLASS}" {attrs}>{_escape(slot.text)}</span>'


def _block_html(block: Block) -> str:
    inner = "".join(_slot_html(r) if isinstance(r, Slot) else _escape(r) for r in block.runs)
    if block.kind == "heading":
        return f"<strong>{inner}</strong>"
    return f"<p>{inner}</p>"


def document_html(document: RichDocument) -> str:
    return "".join(_block_html(block) for block in document.blocks)


def render_html(record: Record) -> str:
    """Editable preview markup for *record*."""
    return document_html(build_document(record))
