"""
Pure operations over the PLAAFP Record.

Every function takes a Record and returns a new one; nothing is mutated in
place and there is no hidden state apart from id generation for new
subsections.

Public API
----------
new_record()                                              -> Record
set_field(record, name, value)                            -> Record
set_section_field(record, list_kind, index, name, value)  -> Record
append_section(record, list_kind, template=None)          -> Record
apply_value(record, locator, value)                       -> Record
"""
from __future__ import annotations

import uuid
from typing import Any, Dict, Mapping, Optional

from app.models.record import (
    RECORD_FIELDS,
    SECTION_FIELDS,
    SECTION_LIST_ATTRS,
    SECTION_MODELS,
    ListKind,
    Locator,
    Record,
    Section,
    SectionField,
    TopLevelField,
)
from app.services.errors import UnknownFieldError


def new_record() -> Record:
    """Return the blank Record: every scalar empty, both lists empty."""
    return Record()


def new_section_id() -> str:
    return uuid.uuid4().hex


def initial_template(list_kind: ListKind) -> Dict[str, str]:
    """Initial field values (wire names) of a freshly appended subsection."""
    return {name: "" for name in SECTION_FIELDS[ListKind(list_kind)]}


def set_field(record: Record, name: str, value: str) -> Record:
    """Replace the top-level field *name* (wire name) with *value*."""
    attr = RECORD_FIELDS.get(name)
    if attr is None:
        raise UnknownFieldError(name)
    return record.model_copy(update={attr: value})


def set_section_field(
    record: Record,
    list_kind: ListKind,
    index: int,
    name: str,
    value: str,
) -> Record:
    """
    Replace field *name* of the subsection at *index* in the *list_kind* list.

    *index* must be a valid position; an out-of-range index raises
    ``IndexError`` and is the caller's responsibility.
    """
    list_kind = ListKind(list_kind)
    attr = SECTION_FIELDS[list_kind].get(name)
    if attr is None:
        raise UnknownFieldError(name, list_kind.value)

    sections = record.sections(list_kind)
    if not 0 <= index < len(sections):
        raise IndexError(
            f"{list_kind.value} section index {index} out of range "
            f"(list has {len(sections)})"
        )

    replaced = sections[index].model_copy(update={attr: value})
    updated = sections[:index] + (replaced,) + sections[index + 1:]
    return record.model_copy(update={SECTION_LIST_ATTRS[list_kind]: updated})


def append_section(
    record: Record,
    list_kind: ListKind,
    template: Optional[Mapping[str, str]] = None,
) -> Record:
    """
    Append a new subsection built from *template* (wire names; defaults to the
    blank initial template) plus a freshly generated id.
    """
    list_kind = ListKind(list_kind)
    values: Dict[str, Any] = dict(initial_template(list_kind))
    if template:
        for name, value in template.items():
            if name not in values:
                raise UnknownFieldError(name, list_kind.value)
            values[name] = value

    model = SECTION_MODELS[list_kind]
    section: Section = model(id=new_section_id(), **values)
    updated = record.sections(list_kind) + (section,)
    return record.model_copy(update={SECTION_LIST_ATTRS[list_kind]: updated})


def read_value(record: Record, locator: Locator) -> Optional[str]:
    """Current value at *locator*, or ``None`` if it does not resolve."""
    if isinstance(locator, TopLevelField):
        attr = RECORD_FIELDS.get(locator.name)
        return getattr(record, attr) if attr else None

    attr = SECTION_FIELDS[locator.list_kind].get(locator.name)
    sections = record.sections(locator.list_kind)
    if attr is None or not 0 <= locator.index < len(sections):
        return None
    return getattr(sections[locator.index], attr)


def apply_value(record: Record, locator: Locator, value: str) -> Record:
    """Route a located value through ``set_field`` / ``set_section_field``."""
    if isinstance(locator, SectionField):
        return set_section_field(
            record, locator.list_kind, locator.index, locator.name, value
        )
    return set_field(record, locator.name, value)
