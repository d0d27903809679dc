"""
Reusable component builders for the scratch-generated documents.

Every builder appends a styled fragment (a table or a run of paragraphs) to
a python-docx ``Document`` and returns it. Builders never validate their
input: an empty list yields an empty table, so callers decide which sections
to omit.

Paragraph content is described with ``ParagraphSpec`` values: a plain string
renders as body text, a sequence of ``Span`` objects renders run by run.
"""
from __future__ import annotations

import dataclasses
import datetime
import io
from typing import List, Optional, Sequence, Tuple, Union

from docx import Document
from docx.document import Document as DocumentObject
from docx.enum.table import WD_CELL_VERTICAL_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.shared import Emu, Inches, Pt, RGBColor
from docx.table import Table, _Cell
from docx.text.paragraph import Paragraph
from docx.text.run import Run

from lessondocs.config import settings
from lessondocs.services.docx_styles import Theme, get_theme
from lessondocs.utils.helpers import normalize_package, xml_text
from lessondocs.utils.oxml import (
    set_cell_borders,
    set_table_cell_margins,
    set_table_layout,
    shade_cell,
)

# Core properties are pinned so repeated renders are byte-identical
_FIXED_TIMESTAMP = datetime.datetime(2000, 1, 1, tzinfo=datetime.timezone.utc)


@dataclasses.dataclass(frozen=True)
class Span:
    """A run of text inside a paragraph."""

    text: str
    bold: Optional[bool] = None
    heading: bool = False
    size: Optional[float] = None


@dataclasses.dataclass(frozen=True)
class Card:
    """One coloured cell of a three-column card row."""

    label: str
    content: str
    color: str


ParagraphSpec = Union[str, Sequence[Span]]


# ---------------------------------------------------------------------------
# Document lifecycle
# ---------------------------------------------------------------------------

def new_document(theme: Optional[Theme] = None, margin: Optional[float] = None) -> DocumentObject:
    """
    Create an empty document with the theme's base font and page margins.

    Args:
        theme: Visual theme; defaults to the configured preset
        margin: Page margin in inches on all four sides
    """
    theme = theme or get_theme()
    doc = Document()

    normal = doc.styles["Normal"]
    normal.font.name = theme.font
    normal.font.size = Pt(theme.sizes.body)
    normal.paragraph_format.space_after = Pt(6)
    normal.paragraph_format.line_spacing = 1.15

    if margin is not None:
        for section in doc.sections:
            section.top_margin = Inches(margin)
            section.bottom_margin = Inches(margin)
            section.left_margin = Inches(margin)
            section.right_margin = Inches(margin)
    return doc


def save_document(doc: DocumentObject) -> bytes:
    """Serialize a document to deterministic DOCX bytes."""
    core = doc.core_properties
    core.created = _FIXED_TIMESTAMP
    core.modified = _FIXED_TIMESTAMP
    core.last_printed = _FIXED_TIMESTAMP
    core.revision = 1

    buffer = io.BytesIO()
    doc.save(buffer)
    return normalize_package(buffer.getvalue())


def spacer(doc: DocumentObject) -> Paragraph:
    return doc.add_paragraph()


def page_break(doc: DocumentObject) -> Paragraph:
    paragraph = doc.add_paragraph()
    paragraph.add_run().add_break(WD_BREAK.PAGE)
    return paragraph


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def styled_run(
    paragraph: Paragraph,
    text: str,
    theme: Theme,
    *,
    size: Optional[float] = None,
    color: Optional[str] = None,
    bold: Optional[bool] = None,
) -> Run:
    """Append a run with explicit font, size and colour."""
    run = paragraph.add_run(xml_text(text))
    run.font.name = theme.font
    run.font.size = Pt(size or theme.sizes.body)
    run.font.color.rgb = RGBColor.from_string(color or theme.palette.dark_gray)
    if bold is not None:
        run.bold = bold
    return run


def body_text(paragraph: Paragraph, text: str, theme: Theme, size: Optional[float] = None,
              bold: Optional[bool] = None) -> Run:
    return styled_run(paragraph, text, theme, size=size, bold=bold)


def heading_text(paragraph: Paragraph, text: str, theme: Theme, size: Optional[float] = None,
                 bold: bool = True) -> Run:
    return styled_run(
        paragraph, text, theme,
        size=size or theme.sizes.heading_1,
        color=theme.palette.primary,
        bold=bold,
    )


def white_text(paragraph: Paragraph, text: str, theme: Theme, size: Optional[float] = None,
               bold: Optional[bool] = None) -> Run:
    return styled_run(paragraph, text, theme, size=size, color=theme.palette.white, bold=bold)


def _fill_paragraph(paragraph: Paragraph, spec: ParagraphSpec, theme: Theme,
                    size: Optional[float] = None) -> Paragraph:
    if isinstance(spec, str):
        body_text(paragraph, spec, theme, size=size)
        return paragraph
    for span in spec:
        span_size = span.size or size
        if span.heading:
            heading_text(paragraph, span.text, theme, size=span_size or theme.sizes.body,
                         bold=span.bold if span.bold is not None else True)
        else:
            body_text(paragraph, span.text, theme, size=span_size, bold=span.bold)
    return paragraph


def _cell_paragraph(cell: _Cell, index: int) -> Paragraph:
    """First paragraph of a fresh cell is reused; later ones are appended."""
    if index == 0 and cell.paragraphs:
        return cell.paragraphs[0]
    return cell.add_paragraph()


def _fill_cell(cell: _Cell, specs: Sequence[ParagraphSpec], theme: Theme,
               size: Optional[float] = None, bullets: bool = False) -> None:
    for idx, spec in enumerate(specs):
        paragraph = _cell_paragraph(cell, idx)
        if bullets:
            paragraph.style = "List Bullet"
        _fill_paragraph(paragraph, spec, theme, size=size)


# ---------------------------------------------------------------------------
# Table scaffolding
# ---------------------------------------------------------------------------

def _new_table(doc: DocumentObject, rows: int, widths: Sequence, theme: Theme) -> Table:
    table = doc.add_table(rows=rows, cols=len(widths))
    set_table_layout(table, *widths)
    set_table_cell_margins(table, *theme.cell_margins)
    return table


def _style_cell(cell: _Cell, theme: Theme, fill: Optional[str] = None,
                border: bool = True) -> _Cell:
    if fill:
        shade_cell(cell, fill)
    set_cell_borders(cell, theme.palette.border_gray if border else None, theme.border_size)
    return cell


def _split_width(width, parts: int) -> Emu:
    return Emu(int(width) // parts)


def _pad_pairs(items: Sequence) -> List[Tuple]:
    """Group items two by two; an odd trailing item is paired with None."""
    return [
        (items[i], items[i + 1] if i + 1 < len(items) else None)
        for i in range(0, len(items), 2)
    ]


# ---------------------------------------------------------------------------
# Section headers and boxes
# ---------------------------------------------------------------------------

def section_header(doc: DocumentObject, text: str, level: int = 1,
                   theme: Optional[Theme] = None, width=None) -> Table:
    """
    Single-row header: a narrow accent flag beside the heading text.

    ``level`` 1 uses the large heading size, anything else the smaller tier.
    """
    theme = theme or get_theme()
    width = width or theme.teacher_width()
    accent = Inches(theme.accent_width)
    size = theme.sizes.heading_1 if level == 1 else theme.sizes.heading_2

    table = _new_table(doc, 1, (accent, width - accent), theme)
    flag, label = table.rows[0].cells
    _style_cell(flag, theme, fill=theme.palette.primary, border=False)
    _style_cell(label, theme, border=False)
    label.vertical_alignment = WD_CELL_VERTICAL_ALIGNMENT.CENTER
    heading_text(label.paragraphs[0], text, theme, size=size)
    return table


def content_box(doc: DocumentObject, paragraphs: Sequence[ParagraphSpec],
                bg_color: Optional[str] = None, has_border: bool = True,
                theme: Optional[Theme] = None, width=None,
                size: Optional[float] = None, bullets: bool = False) -> Table:
    """Single shaded cell wrapping arbitrary paragraph content."""
    theme = theme or get_theme()
    table = _new_table(doc, 1, (width or theme.teacher_width(),), theme)
    cell = table.cell(0, 0)
    _style_cell(cell, theme, fill=bg_color or theme.palette.primary_light, border=has_border)
    _fill_cell(cell, paragraphs, theme, size=size, bullets=bullets)
    return table


def note_box(doc: DocumentObject, paragraphs: Sequence[ParagraphSpec],
             theme: Optional[Theme] = None, width=None, bullets: bool = False) -> Table:
    """Cream-yellow bordered box for teacher notes and tips."""
    theme = theme or get_theme()
    return content_box(
        doc, paragraphs,
        bg_color=theme.palette.cream_yellow,
        theme=theme,
        width=width,
        size=theme.sizes.body_small,
        bullets=bullets,
    )


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------

def numbered_badge_list(doc: DocumentObject, items: Sequence[str],
                        theme: Optional[Theme] = None, width=None,
                        alternate_rows: bool = False) -> Table:
    """One row per item: a navy badge with the 1-based index beside the text."""
    theme = theme or get_theme()
    width = width or theme.teacher_width()
    badge_width = Inches(theme.badge_width)
    table = _new_table(doc, len(items), (badge_width, width - badge_width), theme)

    for idx, (item, row) in enumerate(zip(items, table.rows)):
        badge, content = row.cells
        _style_cell(badge, theme, fill=theme.palette.primary)
        badge.vertical_alignment = WD_CELL_VERTICAL_ALIGNMENT.CENTER
        number = badge.paragraphs[0]
        number.alignment = WD_ALIGN_PARAGRAPH.CENTER
        white_text(number, str(idx + 1), theme, size=theme.sizes.badge, bold=True)

        fill = theme.palette.light_gray if alternate_rows and idx % 2 == 1 else None
        _style_cell(content, theme, fill=fill)
        content.vertical_alignment = WD_CELL_VERTICAL_ALIGNMENT.CENTER
        body_text(content.paragraphs[0], item, theme)
    return table


def bullet_list(doc: DocumentObject, items: Sequence[str], theme: Optional[Theme] = None,
                size: Optional[float] = None) -> List[Paragraph]:
    theme = theme or get_theme()
    paragraphs = []
    for item in items:
        paragraph = doc.add_paragraph(style="List Bullet")
        body_text(paragraph, item, theme, size=size)
        paragraphs.append(paragraph)
    return paragraphs


def inline_list(doc: DocumentObject, items: Sequence[str], theme: Optional[Theme] = None,
                separator: str = "  |  ") -> Paragraph:
    """All items on one line, separated by grey dividers."""
    theme = theme or get_theme()
    paragraph = doc.add_paragraph()
    for idx, item in enumerate(items):
        if idx > 0:
            styled_run(paragraph, separator, theme, color=theme.palette.medium_gray)
        body_text(paragraph, item, theme)
    return paragraph


# ---------------------------------------------------------------------------
# Grids
# ---------------------------------------------------------------------------

def card_grid(doc: DocumentObject, pairs: Sequence[Tuple[str, str]],
              theme: Optional[Theme] = None, width=None,
              alternate_colors: bool = True) -> Table:
    """
    Term/definition cards in a two-column grid.

    Consecutive pairs share a row; an odd count leaves a blank, borderless
    trailing cell. Shading alternates every row of two cards.
    """
    theme = theme or get_theme()
    half = _split_width(width or theme.teacher_width(), 2)
    rows = _pad_pairs(list(pairs))
    table = _new_table(doc, len(rows), (half, half), theme)

    for row_idx, (row_items, row) in enumerate(zip(rows, table.rows)):
        fill = theme.palette.light_gray if alternate_colors and row_idx % 2 == 1 \
            else theme.palette.primary_light
        for item, cell in zip(row_items, row.cells):
            if item is None:
                _style_cell(cell, theme, border=False)
                continue
            term, definition = item
            _style_cell(cell, theme, fill=fill)
            heading_text(cell.paragraphs[0], term, theme, size=theme.sizes.body)
            body_text(cell.add_paragraph(), definition, theme, size=theme.sizes.body_small)
    return table


def checklist_grid(doc: DocumentObject, items: Sequence[str],
                   theme: Optional[Theme] = None, width=None) -> Table:
    """Two-column grid of ``[ ] item`` entries with the same odd padding as cards."""
    theme = theme or get_theme()
    half = _split_width(width or theme.teacher_width(), 2)
    rows = _pad_pairs(list(items))
    table = _new_table(doc, len(rows), (half, half), theme)

    for row_items, row in zip(rows, table.rows):
        for item, cell in zip(row_items, row.cells):
            _style_cell(cell, theme, border=False)
            if item is not None:
                body_text(cell.paragraphs[0], f"[ ] {item}", theme)
    return table


def three_column_cards(doc: DocumentObject, cards: Sequence[Card],
                       theme: Optional[Theme] = None, width=None) -> Table:
    """Side-by-side coloured cells; empty content renders as ``N/A``."""
    theme = theme or get_theme()
    third = _split_width(width or theme.teacher_width(), 3)
    table = _new_table(doc, 1, [third] * len(cards), theme)

    for card, cell in zip(cards, table.rows[0].cells):
        _style_cell(cell, theme, fill=card.color)
        heading_text(cell.paragraphs[0], card.label, theme, size=theme.sizes.body_small)
        body_text(cell.add_paragraph(), card.content or "N/A", theme, size=theme.sizes.caption)
    return table


def schedule_table(doc: DocumentObject, items: Sequence, theme: Optional[Theme] = None) -> Table:
    """
    Time / Activity / Description table with a navy header row.

    Rows keep the input order; body rows are zebra striped.
    """
    theme = theme or get_theme()
    table = _new_table(doc, len(items) + 1, theme.schedule_widths, theme)

    for idx, (cell, title) in enumerate(zip(table.rows[0].cells, ("Time", "Activity", "Description"))):
        _style_cell(cell, theme, fill=theme.palette.primary)
        paragraph = cell.paragraphs[0]
        if idx == 0:
            paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        white_text(paragraph, title, theme, bold=True)

    for idx, (item, row) in enumerate(zip(items, table.rows[1:])):
        time_cell, name_cell, desc_cell = row.cells
        stripe = theme.palette.light_gray if idx % 2 == 1 else theme.palette.white

        _style_cell(time_cell, theme, fill=theme.palette.primary_light)
        time_paragraph = time_cell.paragraphs[0]
        time_paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        heading_text(time_paragraph, item.time, theme, size=theme.sizes.body_small)

        _style_cell(name_cell, theme, fill=stripe)
        body_text(name_cell.paragraphs[0], item.name, theme, size=theme.sizes.body_small, bold=True)

        _style_cell(desc_cell, theme, fill=stripe)
        body_text(desc_cell.paragraphs[0], item.description, theme, size=theme.sizes.body_small)
    return table


def vocab_table(doc: DocumentObject, pairs: Sequence[Tuple[str, str]],
                theme: Optional[Theme] = None) -> Table:
    """Two-column Term / Definition table for student handouts."""
    theme = theme or get_theme()
    widths = (Inches(2.0), theme.student_width() - Inches(2.0))
    table = _new_table(doc, len(pairs) + 1, widths, theme)

    for cell, title in zip(table.rows[0].cells, ("Term", "Definition")):
        _style_cell(cell, theme, fill=theme.palette.primary)
        white_text(cell.paragraphs[0], title, theme, bold=True)

    for idx, ((term, definition), row) in enumerate(zip(pairs, table.rows[1:])):
        stripe = theme.palette.light_gray if idx % 2 == 1 else theme.palette.white
        term_cell, def_cell = row.cells
        _style_cell(term_cell, theme, fill=stripe)
        heading_text(term_cell.paragraphs[0], term, theme, size=theme.sizes.body_small)
        _style_cell(def_cell, theme, fill=stripe)
        body_text(def_cell.paragraphs[0], definition, theme, size=theme.sizes.body_small)
    return table


# ---------------------------------------------------------------------------
# Student response blocks
# ---------------------------------------------------------------------------

def writing_lines(doc: DocumentObject, count: int, theme: Optional[Theme] = None,
                  indent: Optional[float] = None) -> List[Paragraph]:
    """Blank underscore lines for written answers."""
    theme = theme or get_theme()
    lines = []
    for _ in range(count):
        paragraph = doc.add_paragraph()
        paragraph.paragraph_format.space_after = Pt(14)
        if indent:
            paragraph.paragraph_format.left_indent = Inches(indent)
        styled_run(paragraph, "_" * theme.line_length, theme, color=theme.palette.line_gray)
        lines.append(paragraph)
    return lines


def question_block(doc: DocumentObject, question: str, index: int,
                   answer_lines: Optional[int] = None,
                   theme: Optional[Theme] = None) -> List[Paragraph]:
    """
    A numbered question followed by blank answer lines.

    Args:
        index: Zero-based position; rendered as ``index + 1``
        answer_lines: Defaults to ``settings.ANSWER_LINES``
    """
    theme = theme or get_theme()
    if answer_lines is None:
        answer_lines = settings.ANSWER_LINES

    prompt = doc.add_paragraph()
    prompt.paragraph_format.space_before = Pt(8)
    styled_run(prompt, f"{index + 1}. ", theme, color=theme.palette.primary, bold=True)
    body_text(prompt, question, theme)
    return [prompt] + writing_lines(doc, answer_lines, theme, indent=0.25)


# ---------------------------------------------------------------------------
# Header banners
# ---------------------------------------------------------------------------

def teacher_header_banner(doc: DocumentObject, week_number: Optional[int], unit: str,
                          theme: Optional[Theme] = None) -> Table:
    """Navy ``WEEK N: UNIT`` title block."""
    theme = theme or get_theme()
    table = _new_table(doc, 1, (theme.teacher_width(),), theme)
    cell = table.cell(0, 0)
    _style_cell(cell, theme, fill=theme.palette.primary, border=False)

    paragraph = cell.paragraphs[0]
    paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    paragraph.paragraph_format.space_before = Pt(10)
    paragraph.paragraph_format.space_after = Pt(10)
    prefix = f"WEEK {week_number}: " if week_number is not None else ""
    white_text(paragraph, prefix, theme, size=theme.sizes.title, bold=True)
    white_text(paragraph, (unit or "").upper(), theme, size=theme.sizes.title, bold=True)
    return table


def student_header_banner(doc: DocumentObject, title: str, subtitle: Optional[str] = None,
                          theme: Optional[Theme] = None) -> Table:
    """Navy title block with an optional light subtitle line."""
    theme = theme or get_theme()
    table = _new_table(doc, 1, (theme.student_width(),), theme)
    cell = table.cell(0, 0)
    _style_cell(cell, theme, fill=theme.palette.primary, border=False)

    heading = cell.paragraphs[0]
    heading.alignment = WD_ALIGN_PARAGRAPH.CENTER
    heading.paragraph_format.space_before = Pt(10)
    heading.paragraph_format.space_after = Pt(4 if subtitle else 10)
    white_text(heading, title or "Student Handout", theme, size=theme.sizes.student_title, bold=True)

    if subtitle:
        sub = cell.add_paragraph()
        sub.alignment = WD_ALIGN_PARAGRAPH.CENTER
        sub.paragraph_format.space_after = Pt(10)
        styled_run(sub, subtitle, theme, color=theme.palette.primary_light)
    return table


def day_header_banner(doc: DocumentObject, day_number: int, day_name: str, topic: str,
                      theme: Optional[Theme] = None) -> Table:
    """Navy ``DAY N`` tab beside a light ``DayName: Topic`` cell."""
    theme = theme or get_theme()
    table = _new_table(doc, 1, theme.day_banner_widths, theme)
    tab, title = table.rows[0].cells

    _style_cell(tab, theme, fill=theme.palette.primary)
    tab.vertical_alignment = WD_CELL_VERTICAL_ALIGNMENT.CENTER
    tab_paragraph = tab.paragraphs[0]
    tab_paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    white_text(tab_paragraph, f"DAY {day_number}", theme, size=theme.sizes.day_number, bold=True)

    _style_cell(title, theme, fill=theme.palette.primary_light)
    title.vertical_alignment = WD_CELL_VERTICAL_ALIGNMENT.CENTER
    title_paragraph = title.paragraphs[0]
    heading_text(title_paragraph, f"{day_name}: ", theme, size=theme.sizes.day_header)
    heading_text(title_paragraph, topic or "Untitled", theme, size=theme.sizes.day_header, bold=False)
    return table
