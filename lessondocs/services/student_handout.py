"""
Student handout generator.

One handout per ``StudentHandout`` entry: a title banner, optional
instructions, the content sections in order, then questions, vocabulary and
tips.
"""
from __future__ import annotations

import logging
from typing import Optional

from docx.document import Document as DocumentObject

from lessondocs.config import settings
from lessondocs.models.lesson import HandoutSection, StudentHandout
from lessondocs.services.docx_components import (
    body_text,
    bullet_list,
    content_box,
    new_document,
    note_box,
    numbered_badge_list,
    question_block,
    save_document,
    section_header,
    spacer,
    student_header_banner,
    vocab_table,
    writing_lines,
)
from lessondocs.services.docx_styles import Theme, get_theme
from lessondocs.utils.helpers import slugify

logger = logging.getLogger(__name__)


def _add_section(doc: DocumentObject, section: HandoutSection, theme: Theme) -> None:
    width = theme.student_width()
    section_header(doc, section.heading or "Content", theme=theme, width=width)

    if section.content:
        body_text(doc.add_paragraph(), section.content, theme)

    if section.items:
        if section.numbered:
            numbered_badge_list(doc, section.items, theme=theme, width=width, alternate_rows=True)
        else:
            bullet_list(doc, section.items, theme=theme)

    if section.blank_lines:
        spacer(doc)
        writing_lines(doc, section.blank_lines, theme=theme)

    spacer(doc)


def generate_student_handout(handout: StudentHandout, theme: Optional[Theme] = None) -> bytes:
    """
    Build a student handout document.

    Args:
        handout: Handout content
        theme: Visual theme; defaults to the configured preset

    Returns:
        DOCX bytes
    """
    theme = theme or get_theme()
    width = theme.student_width()
    doc = new_document(theme, margin=theme.student_margin)

    student_header_banner(doc, handout.title or handout.name, handout.subtitle, theme=theme)
    spacer(doc)

    if handout.instructions:
        section_header(doc, "Instructions", theme=theme, width=width)
        content_box(doc, [handout.instructions], theme=theme, width=width)
        spacer(doc)

    for section in handout.sections:
        _add_section(doc, section, theme)

    if handout.questions:
        section_header(doc, "Questions", theme=theme, width=width)
        for idx, question in enumerate(handout.questions):
            question_block(doc, question, idx, theme=theme)
            spacer(doc)

    if handout.vocabulary:
        section_header(doc, "Vocabulary", theme=theme, width=width)
        vocab_table(doc, list(handout.vocabulary.items()), theme=theme)
        spacer(doc)

    if handout.tips:
        section_header(doc, "Tips & Notes", theme=theme, width=width)
        note_box(doc, handout.tips, theme=theme, width=width, bullets=True)

    logger.info("Built student handout %r (%d sections)", handout.name, len(handout.sections))
    return save_document(doc)


def student_handout_filename(handout: StudentHandout) -> str:
    """``<NameSlug>_StudentHandout.docx`` with the slug bounded in length."""
    name_slug = slugify(handout.name, settings.STUDENT_SLUG_LENGTH, default="Handout")
    return f"{name_slug}_StudentHandout.docx"
