"""
CTE template filler.

Fills the CTE lesson plan template in place: the DOCX archive is opened,
``word/document.xml`` is parsed into an lxml tree, and the cells named by
``TEMPLATE_SCHEMA`` are rewritten. Nothing is re-laid-out. Text cells get
their first run replaced (later runs are emptied, red guidance colouring is
dropped); checkbox cells only have the underscores of selected labels
(``___ Label``) turned into ``X``. Every other archive member is copied
through untouched.

Precondition: the template is the fixed 18-row CTE table. Rows are counted
across the body's top-level tables in document order (nested tables are never
counted) and cells are the direct children of a row. A template whose layout
does not provide every addressed cell raises ``TemplateSchemaError`` in
strict mode; in lenient mode the missing fields are skipped.
"""
from __future__ import annotations

import dataclasses
import io
import logging
import re
import zipfile
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from docx.oxml.ns import qn
from lxml import etree

from lessondocs.config import settings
from lessondocs.models.lesson import DayPlan, Differentiation, LessonPlanInput, ScheduleItem
from lessondocs.services.inference import (
    ASSESSMENT_CHECKBOXES,
    CURRICULUM_CHECKBOXES,
    MATERIALS_CHECKBOXES,
    METHODS_CHECKBOXES,
    OTHER_AREAS_CHECKBOXES,
    infer_day_checkboxes,
)
from lessondocs.utils.helpers import xml_text

logger = logging.getLogger(__name__)

DOCUMENT_PART = "word/document.xml"

_W_BODY = qn("w:body")
_W_TBL = qn("w:tbl")
_W_TR = qn("w:tr")
_W_TC = qn("w:tc")
_W_P = qn("w:p")
_W_R = qn("w:r")
_W_RPR = qn("w:rPr")
_W_T = qn("w:t")
_W_BR = qn("w:br")
_W_CR = qn("w:cr")
_W_TAB = qn("w:tab")
_W_COLOR = qn("w:color")
_W_VAL = qn("w:val")
_XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"

_TEXT_CONTENT = (_W_T, _W_BR, _W_CR, _W_TAB)

# Red shades (red channel >= 0x80, no green/blue) mark "fill me in" guidance
_RED_COLOR = re.compile(r"^[89A-F][0-9A-F]0000$", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class TemplateError(Exception):
    """Base class for template problems."""


class InvalidTemplateError(TemplateError):
    """The archive is unreadable or has no main document part."""


class TemplateSchemaError(TemplateError):
    """The template's rows/cells do not match the positional schema."""

    def __init__(self, missing_fields: Sequence[str], row_count: int) -> None:
        self.missing_fields = list(missing_fields)
        self.row_count = row_count
        details = ", ".join(
            f"{name} (row {TEMPLATE_SCHEMA[name].row}, column {TEMPLATE_SCHEMA[name].column})"
            for name in self.missing_fields
        )
        super().__init__(
            f"Template does not match the CTE layout: missing {details}; "
            f"template has {row_count} table rows"
        )


class DayIndexError(IndexError):
    """Requested day is outside the lesson plan."""

    def __init__(self, day_index: int, day_count: int) -> None:
        self.day_index = day_index
        self.day_count = day_count
        super().__init__(
            f"Day index {day_index} out of range. Lesson plan has {day_count} days."
        )


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class CellKind(str, Enum):
    TEXT = "text"
    CHECKBOX = "checkbox"


@dataclasses.dataclass(frozen=True)
class CellAddress:
    """Zero-based (row, column) coordinate of a template field."""

    row: int
    column: int
    kind: CellKind = CellKind.TEXT
    labels: Optional[Mapping[str, str]] = dataclasses.field(default=None, compare=False, hash=False)


TEMPLATE_SCHEMA: Dict[str, CellAddress] = {
    "week": CellAddress(1, 0),
    "course_title": CellAddress(1, 1),
    "topic": CellAddress(2, 0),
    "duration": CellAddress(2, 1),
    "content_standards": CellAddress(5, 0),
    "overview": CellAddress(7, 0),
    "materials": CellAddress(7, 1, CellKind.CHECKBOX, MATERIALS_CHECKBOXES),
    "procedures": CellAddress(9, 0),
    "methods": CellAddress(11, 0, CellKind.CHECKBOX, METHODS_CHECKBOXES),
    "assessment": CellAddress(13, 0, CellKind.CHECKBOX, ASSESSMENT_CHECKBOXES),
    "differentiation": CellAddress(13, 1),
    "curriculum": CellAddress(15, 0, CellKind.CHECKBOX, CURRICULUM_CHECKBOXES),
    "other_areas": CellAddress(17, 0, CellKind.CHECKBOX, OTHER_AREAS_CHECKBOXES),
}


@dataclasses.dataclass
class TemplateReport:
    """Outcome of checking a template against ``TEMPLATE_SCHEMA``."""

    row_count: int
    missing_fields: List[str] = dataclasses.field(default_factory=list)
    # Checkbox field -> labels whose "___ Label" placeholder was not found
    missing_labels: Dict[str, List[str]] = dataclasses.field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.missing_fields and not self.missing_labels


# ---------------------------------------------------------------------------
# Cell text builders
# ---------------------------------------------------------------------------

def build_procedures_text(schedule: Sequence[ScheduleItem]) -> str:
    """
    One ``time - name: description`` line per activity.

    Activities without a name are dropped.
    """
    lines = []
    for item in schedule or ():
        time, name, desc = item.time or "", item.name or "", item.description or ""
        if time and name:
            lines.append(f"{time} - {name}: {desc}" if desc else f"{time} - {name}")
        elif name:
            lines.append(f"{name}: {desc}" if desc else name)
    return "\n".join(lines)


def build_differentiation_text(diff: Differentiation) -> str:
    lines = []
    if diff.advanced:
        lines.append(f"Advanced Learners: {diff.advanced}")
    if diff.struggling:
        lines.append(f"Struggling Learners: {diff.struggling}")
    if diff.ell:
        lines.append(f"ELL Students: {diff.ell}")
    return "\n".join(lines)


def build_overview_text(day: DayPlan) -> str:
    """The day's overview, or a sentence synthesized from topic and first objective."""
    if day.overview:
        return day.overview

    parts = [f"Students will learn about {day.topic}."]
    if day.objectives:
        objective = day.objectives[0].lower()
        objective = re.sub(r"^students will ", "", objective)
        objective = re.sub(r"^to ", "", objective)
        parts.append(f"The primary objective is to {objective.rstrip('.')}.")
    return " ".join(parts)


def build_text_values(lesson_plan: LessonPlanInput, day: DayPlan) -> Dict[str, str]:
    """Text for every TEXT field of the schema."""
    course_title = lesson_plan.course_title or settings.DEFAULT_COURSE_TITLE
    duration = lesson_plan.class_duration or settings.DEFAULT_CLASS_DURATION
    return {
        "week": f"Week: {lesson_plan.week}",
        "course_title": f"Course Title: {course_title}",
        "topic": f"Topic: {day.topic}",
        "duration": f"Estimate duration in minutes: {duration}",
        "content_standards": day.content_standards or lesson_plan.standards_alignment,
        "overview": build_overview_text(day),
        "procedures": build_procedures_text(day.schedule),
        "differentiation": build_differentiation_text(day.differentiation),
    }


# ---------------------------------------------------------------------------
# Package I/O
# ---------------------------------------------------------------------------

def _read_package(template_bytes: bytes) -> List[Tuple[zipfile.ZipInfo, bytes]]:
    buffer = io.BytesIO(template_bytes or b"")
    if not zipfile.is_zipfile(buffer):
        raise InvalidTemplateError("Invalid DOCX file: not a ZIP archive")
    with zipfile.ZipFile(buffer) as zf:
        if DOCUMENT_PART not in zf.namelist():
            raise InvalidTemplateError(f"Invalid DOCX file: missing {DOCUMENT_PART}")
        return [(info, zf.read(info)) for info in zf.infolist()]


def _write_package(entries: Iterable[Tuple[zipfile.ZipInfo, bytes]], document_xml: bytes) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for info, data in entries:
            if info.filename == DOCUMENT_PART:
                data = document_xml
            out = zipfile.ZipInfo(info.filename, date_time=info.date_time)
            out.compress_type = info.compress_type
            out.external_attr = info.external_attr
            zf.writestr(out, data)
    return buffer.getvalue()


def _parse_document(entries: Sequence[Tuple[zipfile.ZipInfo, bytes]]) -> etree._Element:
    xml = next(data for info, data in entries if info.filename == DOCUMENT_PART)
    parser = etree.XMLParser(resolve_entities=False, remove_blank_text=False)
    try:
        return etree.fromstring(xml, parser)
    except etree.XMLSyntaxError as exc:
        raise InvalidTemplateError(f"Invalid DOCX file: {DOCUMENT_PART} is not well-formed: {exc}") from exc


def _serialize_document(root: etree._Element) -> bytes:
    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", standalone=True)


# ---------------------------------------------------------------------------
# Table addressing
# ---------------------------------------------------------------------------

def table_rows(root: etree._Element) -> List[List[etree._Element]]:
    """Rows of the body's top-level tables, each as its list of cells."""
    body = root.find(_W_BODY)
    if body is None:
        return []
    rows = []
    for tbl in body.iter(_W_TBL):
        if any(ancestor.tag == _W_TBL for ancestor in tbl.iterancestors()):
            continue
        for tr in tbl.iterchildren(_W_TR):
            rows.append(list(tr.iterchildren(_W_TC)))
    return rows


def _cell_at(rows: Sequence[Sequence[etree._Element]], address: CellAddress) -> Optional[etree._Element]:
    if address.row < len(rows) and address.column < len(rows[address.row]):
        return rows[address.row][address.column]
    return None


def _missing_fields(rows) -> List[str]:
    return [name for name, address in TEMPLATE_SCHEMA.items() if _cell_at(rows, address) is None]


def _paragraph_texts(paragraph: etree._Element) -> List[etree._Element]:
    """``w:t`` nodes of one paragraph, excluding those of nested paragraphs."""
    return [
        t for t in paragraph.iter(_W_T)
        if next(t.iterancestors(_W_P), None) is paragraph
    ]


def cell_text(cell: etree._Element) -> str:
    """Plain text of a cell; paragraphs and line breaks become newlines."""
    paragraphs = []
    for paragraph in cell.iter(_W_P):
        pieces = []
        for node in paragraph.iter(_W_T, _W_BR, _W_CR, _W_TAB):
            if next(node.iterancestors(_W_P), None) is not paragraph:
                continue
            if node.tag == _W_T:
                pieces.append(node.text or "")
            elif node.tag == _W_TAB:
                pieces.append("\t")
            else:
                pieces.append("\n")
        paragraphs.append("".join(pieces))
    return "\n".join(paragraphs)


def read_table_text(document_bytes: bytes) -> List[List[str]]:
    """Text of every addressed-table cell, row by row."""
    root = _parse_document(_read_package(document_bytes))
    return [[cell_text(cell) for cell in row] for row in table_rows(root)]


# ---------------------------------------------------------------------------
# Cell surgery
# ---------------------------------------------------------------------------

def _preserve(t: etree._Element) -> None:
    t.set(_XML_SPACE, "preserve")


def _strip_red(cell: etree._Element) -> None:
    for color in list(cell.iter(_W_COLOR)):
        if _RED_COLOR.match(color.get(_W_VAL, "")):
            color.getparent().remove(color)


def _append_lines(anchor: etree._Element, lines: Sequence[str]) -> None:
    """Insert ``w:br`` + ``w:t`` pairs after ``anchor`` for each extra line."""
    for line in lines:
        br = etree.Element(_W_BR)
        t = etree.Element(_W_T)
        t.text = line
        _preserve(t)
        anchor.addnext(br)
        br.addnext(t)
        anchor = t


def _clear_run(run: etree._Element) -> None:
    for child in list(run):
        if child.tag in _TEXT_CONTENT:
            run.remove(child)
    if all(child.tag == _W_RPR for child in run):
        run.getparent().remove(run)


def set_cell_text(cell: etree._Element, text: str) -> None:
    """
    Replace a cell's text while keeping its paragraph and run formatting.

    The first text run receives the new value (lines separated by ``w:br``);
    every other text run in the cell is cleared. A cell with no text run gets
    a new run in its first paragraph.
    """
    _strip_red(cell)
    first_line, *more_lines = (xml_text(text) or "").split("\n")
    texts = list(cell.iter(_W_T))

    if texts:
        first = texts[0]
        first_run = first.getparent()
        for child in list(first_run):
            if child is not first and child.tag in _TEXT_CONTENT:
                first_run.remove(child)
        stale_runs = []
        for t in texts[1:]:
            run = t.getparent()
            if run is not first_run and run not in stale_runs:
                stale_runs.append(run)
        for run in stale_runs:
            _clear_run(run)
        first.text = first_line
        _preserve(first)
        _append_lines(first, more_lines)
        return

    paragraph = next(cell.iter(_W_P), None)
    if paragraph is None:
        paragraph = etree.SubElement(cell, _W_P)
    run = etree.SubElement(paragraph, _W_R)
    t = etree.SubElement(run, _W_T)
    t.text = first_line
    _preserve(t)
    _append_lines(t, more_lines)


def _splice(texts: Sequence[etree._Element], start: int, end: int, replacement: str) -> None:
    """Replace characters [start, end) of the concatenated run text."""
    replacement = xml_text(replacement)
    offset = 0
    placed = False
    for t in texts:
        value = t.text or ""
        node_start, node_end = offset, offset + len(value)
        offset = node_end
        if node_end <= start or node_start >= end:
            continue
        lo = max(start, node_start) - node_start
        hi = min(end, node_end) - node_start
        if placed:
            t.text = value[:lo] + value[hi:]
        else:
            t.text = value[:lo] + replacement + value[hi:]
            placed = True
        _preserve(t)


def _label_pattern(label: str) -> re.Pattern:
    return re.compile(rf"_+\s*{re.escape(label)}", re.IGNORECASE)


def mark_checkboxes(cell: etree._Element, labels: Mapping[str, str], selected: Iterable[str]) -> Set[str]:
    """
    Turn ``___ Label`` into ``X Label`` for every selected key.

    Matching works on each paragraph's concatenated text, so a placeholder
    split across several runs is still found. Unselected labels are left
    untouched.

    Returns:
        The keys that were actually marked
    """
    selected = set(selected)
    marked: Set[str] = set()
    for paragraph in cell.iter(_W_P):
        texts = _paragraph_texts(paragraph)
        if not texts:
            continue
        for key, label in labels.items():
            if key not in selected:
                continue
            pattern = _label_pattern(label)
            full = "".join(t.text or "" for t in texts)
            matches = list(pattern.finditer(full))
            for match in reversed(matches):
                _splice(texts, match.start(), match.end(), f"X {label}")
            if matches:
                marked.add(key)
    return marked


def missing_labels(cell: etree._Element, labels: Mapping[str, str]) -> List[str]:
    """Labels whose underscore placeholder does not appear in the cell."""
    paragraphs = [
        "".join(t.text or "" for t in _paragraph_texts(p)) for p in cell.iter(_W_P)
    ]
    return [
        label for label in labels.values()
        if not any(_label_pattern(label).search(text) for text in paragraphs)
    ]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate_template(template_bytes: bytes) -> TemplateReport:
    """
    Check a template against the positional schema and checkbox labels.

    Raises:
        InvalidTemplateError: not a DOCX archive
    """
    root = _parse_document(_read_package(template_bytes))
    rows = table_rows(root)
    report = TemplateReport(row_count=len(rows), missing_fields=_missing_fields(rows))
    for name, address in TEMPLATE_SCHEMA.items():
        if address.kind is not CellKind.CHECKBOX:
            continue
        cell = _cell_at(rows, address)
        if cell is None:
            continue
        absent = missing_labels(cell, address.labels)
        if absent:
            report.missing_labels[name] = absent
    return report


def fill_template(
    template_bytes: bytes,
    lesson_plan: LessonPlanInput,
    day_index: int,
    strict: Optional[bool] = None,
) -> bytes:
    """
    Fill the CTE template for one day of the lesson plan.

    Args:
        template_bytes: The template DOCX
        lesson_plan: Full week plan
        day_index: Zero-based day position
        strict: Raise on schema mismatch; defaults to ``settings.STRICT_TEMPLATE_SCHEMA``

    Returns:
        The filled DOCX bytes

    Raises:
        DayIndexError: day_index outside ``lesson_plan.days``
        InvalidTemplateError: archive unreadable or missing word/document.xml
        TemplateSchemaError: strict mode and addressed cells are missing
    """
    day_count = len(lesson_plan.days)
    if not 0 <= day_index < day_count:
        raise DayIndexError(day_index, day_count)
    if strict is None:
        strict = settings.STRICT_TEMPLATE_SCHEMA

    day = lesson_plan.days[day_index]
    entries = _read_package(template_bytes)
    root = _parse_document(entries)
    rows = table_rows(root)

    missing = _missing_fields(rows)
    if missing:
        if strict:
            raise TemplateSchemaError(missing, len(rows))
        logger.warning(
            "Template has %d table rows; skipping unaddressable fields: %s",
            len(rows), ", ".join(missing),
        )

    text_values = build_text_values(lesson_plan, day)
    selections = infer_day_checkboxes(day)

    for name, address in TEMPLATE_SCHEMA.items():
        cell = _cell_at(rows, address)
        if cell is None:
            continue
        if address.kind is CellKind.CHECKBOX:
            marked = mark_checkboxes(cell, address.labels, selections[name])
            unmatched = selections[name] - marked
            if unmatched:
                logger.debug("No placeholder found in %s for: %s", name, sorted(unmatched))
        else:
            set_cell_text(cell, text_values[name])

    logger.info("Filled template for day %d (%s)", day_index + 1, day.topic)
    return _write_package(entries, _serialize_document(root))
