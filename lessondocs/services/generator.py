"""
Document generation orchestrator.

For one lesson plan this produces a lesson plan per day (template-filled
when a template is available, scratch-generated otherwise), the weekly
teacher handout, and one handout per ``student_handouts`` entry. Failures
degrade instead of aborting: a day whose fill fails is generated from
scratch, and a document that cannot be generated at all is logged and left
out.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Set

from lessondocs.models.lesson import LessonPlanInput
from lessondocs.models.schemas import FileType
from lessondocs.services.daily_plan import generate_daily_plan
from lessondocs.services.docx_styles import Theme, get_theme
from lessondocs.services.student_handout import generate_student_handout, student_handout_filename
from lessondocs.services.teacher_handout import generate_teacher_handout, teacher_handout_filename
from lessondocs.services.template_filler import fill_template
from lessondocs.services.template_loader import TemplateLoader
from lessondocs.utils.helpers import DOCX_MIME_TYPE, parse_week_number, topic_slug

logger = logging.getLogger(__name__)

TemplateLoadFn = Callable[[Optional[str]], Awaitable[bytes]]


@dataclass
class GeneratedFile:
    """One generated document, ready to be stored or uploaded."""

    name: str
    content: bytes
    mime_type: str = DOCX_MIME_TYPE
    type: FileType = FileType.LESSON_PLAN

    @property
    def size_bytes(self) -> int:
        return len(self.content)


def daily_plan_filename(week_number: int, day_number: int, topic: str) -> str:
    """``Week<NN>_Day<k>_<TopicSlug>.docx``"""
    return f"Week{week_number:02d}_Day{day_number}_{topic_slug(topic)}.docx"


def _unique_name(name: str, used: Set[str]) -> str:
    """Suffix ``_2``, ``_3``... before the extension until the name is free."""
    candidate = name
    stem, dot, ext = name.rpartition(".")
    counter = 2
    while candidate in used:
        candidate = f"{stem}_{counter}{dot}{ext}"
        counter += 1
    used.add(candidate)
    return candidate


def build_documents(
    lesson_plan: LessonPlanInput,
    template_bytes: Optional[bytes],
    week_number: int,
    theme: Optional[Theme] = None,
) -> List[GeneratedFile]:
    """
    Generate every document for a lesson plan.

    Args:
        lesson_plan: Full week plan
        template_bytes: CTE template, or None to scratch-generate every day
        week_number: Week used in filenames and banners
        theme: Visual theme for scratch-generated documents

    Returns:
        Daily plans in day order, then the teacher handout, then student handouts
    """
    theme = theme or get_theme()
    files: List[GeneratedFile] = []
    used_names: Set[str] = set()

    # Daily lesson plans
    for idx, day in enumerate(lesson_plan.days):
        content = None
        if template_bytes is not None:
            try:
                content = fill_template(template_bytes, lesson_plan, idx)
            except Exception as exc:
                logger.warning(
                    "Template fill failed for day %d (%s), generating from scratch: %s",
                    idx + 1, day.topic, exc, exc_info=True,
                )
        if content is None:
            try:
                content = generate_daily_plan(
                    day, week_number, idx + 1, lesson_plan.unit,
                    standards=lesson_plan.standards_alignment, theme=theme,
                )
            except Exception as exc:
                logger.error(
                    "Lesson plan for day %d (%s) failed, skipping: %s",
                    idx + 1, day.topic, exc, exc_info=True,
                )
                continue
        files.append(GeneratedFile(
            name=_unique_name(daily_plan_filename(week_number, idx + 1, day.topic), used_names),
            content=content,
            type=FileType.LESSON_PLAN,
        ))

    # Teacher handout
    try:
        content = generate_teacher_handout(lesson_plan, week_number, theme=theme)
    except Exception as exc:
        logger.error("Teacher handout failed, skipping: %s", exc, exc_info=True)
    else:
        files.append(GeneratedFile(
            name=_unique_name(teacher_handout_filename(lesson_plan, week_number), used_names),
            content=content,
            type=FileType.TEACHER_HANDOUT,
        ))

    # Student handouts
    for handout in lesson_plan.student_handouts or ():
        try:
            content = generate_student_handout(handout, theme=theme)
        except Exception as exc:
            logger.error(
                "Student handout %r failed, skipping: %s", handout.name, exc, exc_info=True
            )
            continue
        files.append(GeneratedFile(
            name=_unique_name(student_handout_filename(handout), used_names),
            content=content,
            type=FileType.STUDENT_HANDOUT,
        ))

    if not lesson_plan.skip_presentations:
        logger.info("Presentation generation is not supported; no slide decks produced")

    return files


async def generate_all_documents(
    lesson_plan: LessonPlanInput,
    template_id: Optional[str] = None,
    loader: Optional[TemplateLoadFn] = None,
    theme: Optional[Theme] = None,
) -> List[GeneratedFile]:
    """
    Load the template and generate every document for a lesson plan.

    Args:
        lesson_plan: Full week plan
        template_id: Stored template id; None selects the bundled template
        loader: Async ``template_id -> bytes`` function; defaults to
            ``TemplateLoader().load``
        theme: Visual theme for scratch-generated documents

    Returns:
        Generated files; never raises for template or handout problems
    """
    week_number = parse_week_number(lesson_plan.week)
    if week_number is None:
        logger.warning("No week number in %r, using 1", lesson_plan.week)
        week_number = 1

    load = loader or TemplateLoader().load
    template_bytes: Optional[bytes] = None
    try:
        template_bytes = await load(template_id)
    except Exception as exc:
        logger.error(
            "Template %r could not be loaded, generating every day from scratch: %s",
            template_id, exc, exc_info=True,
        )

    files = build_documents(lesson_plan, template_bytes, week_number, theme=theme)
    logger.info(
        "Generated %d files for week %d (%s)", len(files), week_number, lesson_plan.unit
    )
    return files
