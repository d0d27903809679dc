"""
Scratch single-day lesson plan.

Used in place of the CTE template when no template could be loaded or the
fill failed for a day.
"""
from __future__ import annotations

import logging
from typing import Optional

from lessondocs.models.lesson import DayPlan
from lessondocs.services.docx_components import (
    Card,
    Span,
    content_box,
    day_header_banner,
    new_document,
    save_document,
    schedule_table,
    section_header,
    spacer,
    three_column_cards,
)
from lessondocs.services.docx_styles import Theme, get_theme
from lessondocs.services.teacher_handout import day_name
from lessondocs.services.template_filler import build_overview_text

logger = logging.getLogger(__name__)


def generate_daily_plan(
    day: DayPlan,
    week_number: int,
    day_number: int,
    unit: str = "",
    standards: str = "",
    theme: Optional[Theme] = None,
) -> bytes:
    """
    Build a one-day lesson plan document.

    Args:
        day: The day's content
        week_number: Week shown in the info box
        day_number: One-based position of the day in the week
        unit: Unit name shown in the info box
        standards: Week-level standards, used when the day has none
        theme: Visual theme; defaults to the configured preset

    Returns:
        DOCX bytes
    """
    theme = theme or get_theme()
    palette = theme.palette
    doc = new_document(theme, margin=theme.teacher_margin)

    day_header_banner(doc, day_number, day_name(day, day_number - 1), day.topic, theme=theme)
    spacer(doc)

    content_box(doc, [[
        Span("Unit: ", heading=True), Span(unit or "N/A"),
        Span("    Week: ", heading=True), Span(str(week_number)),
        Span("    Day: ", heading=True), Span(str(day_number)),
    ]], bg_color=palette.light_gray, theme=theme)
    spacer(doc)

    section_header(doc, "Overview", theme=theme)
    content_box(doc, [build_overview_text(day)], theme=theme)
    spacer(doc)

    if day.objectives:
        section_header(doc, "Learning Objectives", theme=theme)
        content_box(doc, day.objectives, bg_color=palette.white, theme=theme, bullets=True)
        spacer(doc)

    if day.schedule:
        section_header(doc, "Procedures", theme=theme)
        schedule_table(doc, day.schedule, theme=theme)
        spacer(doc)

    if not day.differentiation.is_empty():
        diff = day.differentiation
        section_header(doc, "Differentiation", theme=theme)
        three_column_cards(doc, [
            Card("Advanced Learners", diff.advanced, palette.primary_light),
            Card("Struggling Learners", diff.struggling, palette.cream_yellow),
            Card("ELL Students", diff.ell, palette.soft_green),
        ], theme=theme)
        spacer(doc)

    content_standards = day.content_standards or standards
    if content_standards:
        section_header(doc, "Content Standards", level=2, theme=theme)
        content_box(doc, [content_standards], bg_color=palette.soft_green, theme=theme,
                    size=theme.sizes.body_small)

    logger.debug("Built scratch lesson plan for week %s day %d", week_number, day_number)
    return save_document(doc)
