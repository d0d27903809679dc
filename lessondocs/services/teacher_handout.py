"""
Weekly teacher handout generator.

Walks a lesson plan and lays it out with the component builders: week-level
summary first, then one page per day. Every section is optional and is
skipped when its source field is empty.
"""
from __future__ import annotations

import logging
from typing import Optional

from docx.document import Document as DocumentObject

from lessondocs.config import settings
from lessondocs.models.lesson import DayPlan, LessonPlanInput
from lessondocs.services.docx_components import (
    Card,
    Span,
    card_grid,
    checklist_grid,
    content_box,
    day_header_banner,
    inline_list,
    new_document,
    note_box,
    numbered_badge_list,
    page_break,
    save_document,
    schedule_table,
    section_header,
    spacer,
    teacher_header_banner,
    three_column_cards,
)
from lessondocs.services.docx_styles import Theme, get_theme
from lessondocs.utils.helpers import slugify

logger = logging.getLogger(__name__)

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]


def day_name(day: DayPlan, index: int) -> str:
    """Explicit label, else the weekday by position, else ``Day N``."""
    if day.day_label:
        return day.day_label
    if index < len(DAY_NAMES):
        return DAY_NAMES[index]
    return f"Day {index + 1}"


# ---------------------------------------------------------------------------
# Week-level sections
# ---------------------------------------------------------------------------

def _week_overview(doc: DocumentObject, plan: LessonPlanInput, theme: Theme) -> None:
    if not (plan.week_overview or plan.week_focus):
        return
    section_header(doc, "Week Overview", theme=theme)
    paragraphs = []
    if plan.week_focus:
        paragraphs.append([
            Span("Focus: ", heading=True, size=theme.sizes.badge),
            Span(plan.week_focus),
        ])
    if plan.week_overview:
        paragraphs.append(plan.week_overview)
    content_box(doc, paragraphs, theme=theme)
    spacer(doc)


def _week_objectives(doc: DocumentObject, plan: LessonPlanInput, theme: Theme) -> None:
    if not plan.week_objectives:
        return
    section_header(doc, "Weekly Learning Objectives", theme=theme)
    numbered_badge_list(doc, plan.week_objectives, theme=theme)
    spacer(doc)


def _week_vocabulary(doc: DocumentObject, plan: LessonPlanInput, theme: Theme) -> None:
    if not plan.vocabulary_summary:
        return
    section_header(doc, "Key Vocabulary", theme=theme)
    card_grid(doc, list(plan.vocabulary_summary.items()), theme=theme)
    spacer(doc)


def _week_materials(doc: DocumentObject, plan: LessonPlanInput, theme: Theme) -> None:
    if not plan.week_materials:
        return
    section_header(doc, "Materials Needed for the Week", theme=theme)
    checklist_grid(doc, plan.week_materials, theme=theme)
    spacer(doc)


def _assessment_overview(doc: DocumentObject, plan: LessonPlanInput, theme: Theme) -> None:
    if not (plan.formative_assessment or plan.summative_assessment or plan.weekly_deliverable):
        return
    palette = theme.palette
    section_header(doc, "Assessment Overview", theme=theme)
    three_column_cards(doc, [
        Card("Formative", plan.formative_assessment, palette.primary_light),
        Card("Summative", plan.summative_assessment, palette.soft_green),
        Card("Deliverable", plan.weekly_deliverable, palette.cream_yellow),
    ], theme=theme)
    spacer(doc)


def _week_notes(doc: DocumentObject, plan: LessonPlanInput, theme: Theme) -> None:
    if not plan.teacher_notes:
        return
    page_break(doc)
    section_header(doc, "Weekly Teacher Notes", theme=theme)
    note_box(doc, plan.teacher_notes, theme=theme, bullets=True)


# ---------------------------------------------------------------------------
# Day pages
# ---------------------------------------------------------------------------

def add_day_sections(doc: DocumentObject, day: DayPlan, theme: Theme) -> None:
    """Objectives, materials, schedule, vocabulary, differentiation and notes of one day."""
    palette = theme.palette

    if day.objectives:
        section_header(doc, "Learning Objectives", level=2, theme=theme)
        content_box(doc, day.objectives, theme=theme, size=theme.sizes.body_small, bullets=True)

    if day.day_materials:
        section_header(doc, "Materials", level=2, theme=theme)
        inline_list(doc, day.day_materials, theme=theme)

    if day.schedule:
        section_header(doc, "Schedule", level=2, theme=theme)
        schedule_table(doc, day.schedule, theme=theme)

    if day.vocabulary:
        section_header(doc, "Vocabulary", level=2, theme=theme)
        card_grid(doc, list(day.vocabulary.items()), theme=theme)

    if not day.differentiation.is_empty():
        diff = day.differentiation
        section_header(doc, "Differentiation", level=2, theme=theme)
        three_column_cards(doc, [
            Card("Advanced Learners", diff.advanced, palette.primary_light),
            Card("Struggling Learners", diff.struggling, palette.cream_yellow),
            Card("ELL Students", diff.ell, palette.soft_green),
        ], theme=theme)

    if day.teacher_notes:
        section_header(doc, "Teacher Notes", level=2, theme=theme)
        note_box(doc, [day.teacher_notes], theme=theme)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate_teacher_handout(
    lesson_plan: LessonPlanInput,
    week_number: Optional[int],
    theme: Optional[Theme] = None,
) -> bytes:
    """
    Build the weekly teacher handout.

    Args:
        lesson_plan: Full week plan
        week_number: Number shown in the banner; None omits the prefix
        theme: Visual theme; defaults to the configured preset

    Returns:
        DOCX bytes
    """
    theme = theme or get_theme()
    doc = new_document(theme, margin=theme.teacher_margin)

    teacher_header_banner(doc, week_number, lesson_plan.unit, theme=theme)
    spacer(doc)

    _week_overview(doc, lesson_plan, theme)
    _week_objectives(doc, lesson_plan, theme)
    _week_vocabulary(doc, lesson_plan, theme)
    _week_materials(doc, lesson_plan, theme)
    _assessment_overview(doc, lesson_plan, theme)

    for idx, day in enumerate(lesson_plan.days):
        if idx > 0:
            page_break(doc)
        day_header_banner(doc, idx + 1, day_name(day, idx), day.topic, theme=theme)
        spacer(doc)
        add_day_sections(doc, day, theme)
        spacer(doc)

    _week_notes(doc, lesson_plan, theme)

    logger.info(
        "Built teacher handout for week %s (%d days)", week_number, len(lesson_plan.days)
    )
    return save_document(doc)


def teacher_handout_filename(lesson_plan: LessonPlanInput, week_number: int) -> str:
    """``Week<N>_<UnitSlug>_TeacherHandout.docx``"""
    unit_slug = slugify(lesson_plan.unit, settings.UNIT_SLUG_LENGTH, default="Unit")
    return f"Week{week_number}_{unit_slug}_TeacherHandout.docx"
