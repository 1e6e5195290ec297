"""
Reverse sync: merge edits made directly in the rendered preview back into the
Record.

The edited markup is scanned for ``.editable-field[data-field]`` elements.
Each one is resolved to a locator and its live text is compared with what the
previous Record rendered at that locator.  Only values that actually changed
are written back; everything else is left exactly as it was.

Rules
-----
- A live value equal to any text the previous render produced for the same
  locator is unchanged (so untouched ``(placeholder)`` text never leaks into
  the Record).
- Several elements may carry the same locator (``parentName`` appears three
  times); when they diverge, the last changed one in document order wins.
- Locators that no longer resolve (index past the end of a list, unknown
  field, unknown section kind) are skipped.
- Markup that cannot be parsed yields no locators.  ``reconcile`` never
  raises and returns the target Record itself when nothing changed.
- Edits are diffed against the Record the markup was rendered from, then
  written onto the current Record, so form edits made after that render are
  never overwritten by stale span text.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Set, Tuple

from bs4 import BeautifulSoup
from bs4.element import Tag

from app.models.record import ListKind, Locator, Record, SectionField, TopLevelField
from app.services.record_store import apply_value, read_value
from app.services.renderer import EDITABLE_CLASS, project

logger = logging.getLogger(__name__)


def _locator_for(element: Tag) -> Optional[Locator]:
    name = element.get("data-field")
    if not name:
        return None

    index_attr = element.get("data-index")
    if index_attr is None:
        return TopLevelField(name)

    try:
        index = int(index_attr)
        list_kind = ListKind(element.get("data-section-type", ""))
    except ValueError:
        return None
    return SectionField(list_kind, index, name)


def collect_located_values(markup: str) -> List[Tuple[Locator, str]]:
    """All ``(locator, live text)`` pairs found in *markup*, in document order."""
    soup = BeautifulSoup(markup or "", "html.parser")
    located: List[Tuple[Locator, str]] = []
    for element in soup.select(f".{EDITABLE_CLASS}[data-field]"):
        locator = _locator_for(element)
        if locator is not None:
            located.append((locator, element.get_text()))
    return located


def stage_updates(previous: Record, located: List[Tuple[Locator, str]]) -> Dict[Locator, str]:
    """Changed values keyed by locator; later occurrences override earlier ones."""
    rendered: Dict[Locator, Set[str]] = defaultdict(set)
    for locator, text in project(previous):
        rendered[locator].add(text)

    staged: Dict[Locator, str] = {}
    for locator, live in located:
        current = read_value(previous, locator)
        if current is None:
            continue
        if live == current or live in rendered.get(locator, ()):
            continue
        staged[locator] = live
    return staged


def reconcile(
    previous: Record,
    edited_markup: str,
    current: Optional[Record] = None,
) -> Record:
    """
    Merge the changes in *edited_markup* into *current*.

    Changes are detected against *previous*, the Record the markup was
    rendered from.  *current* defaults to *previous*; when the Record has moved
    on since that render, only the edited values are written onto it and
    locators that no longer resolve in *current* are skipped.  Returns
    *current* itself when nothing changed.
    """
    target = previous if current is None else current
    try:
        located = collect_located_values(edited_markup)
    except Exception as exc:
        logger.warning("reconcile: could not parse edited preview — %s", exc)
        return target

    record = target
    applied = 0
    for locator, value in stage_updates(previous, located).items():
        existing = read_value(record, locator)
        if existing is None or existing == value:
            continue
        record = apply_value(record, locator, value)
        applied += 1

    if applied:
        logger.info("reconcile: %d field(s) updated from preview", applied)
    return record
