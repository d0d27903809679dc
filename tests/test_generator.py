"""Tests for the document generation orchestrator."""
import pytest

from lessondocs.models.lesson import DayPlan
from lessondocs.models.schemas import FileType
from lessondocs.services import generator
from lessondocs.services.generator import (
    build_documents,
    daily_plan_filename,
    generate_all_documents,
)
from lessondocs.services.template_filler import read_table_text
from lessondocs.services.template_loader import load_default_template
from lessondocs.utils.helpers import DOCX_MIME_TYPE, is_docx_archive
from tests.conftest import docx_paragraph_texts, docx_text, make_plan


async def _default_loader(template_id=None):
    return load_default_template()


async def _broken_loader(template_id=None):
    raise RuntimeError("storage offline")


def test_daily_plan_filename():
    assert daily_plan_filename(3, 1, "Camera Parts") == "Week03_Day1_Camera_Parts.docx"
    assert daily_plan_filename(12, 2, "Lighting & Tripods") == "Week12_Day2_Lighting___Tripods.docx"


@pytest.mark.asyncio
async def test_generates_every_document(sample_plan):
    files = await generate_all_documents(sample_plan, loader=_default_loader)

    assert [f.name for f in files] == [
        "Week03_Day1_Camera_Parts.docx",
        "Week03_Day2_Lighting___Tripods.docx",
        "Week3_Camera_Fundamentals_TeacherHandout.docx",
        "Camera_Parts_Lighting_Gui_StudentHandout.docx",
        "Exposure_Worksheet_StudentHandout.docx",
    ]
    assert [f.type for f in files] == [
        FileType.LESSON_PLAN,
        FileType.LESSON_PLAN,
        FileType.TEACHER_HANDOUT,
        FileType.STUDENT_HANDOUT,
        FileType.STUDENT_HANDOUT,
    ]
    for f in files:
        assert f.mime_type == DOCX_MIME_TYPE
        assert f.size_bytes == len(f.content)
        assert is_docx_archive(f.content)


@pytest.mark.asyncio
async def test_daily_plans_use_the_template(sample_plan):
    files = await generate_all_documents(sample_plan, loader=_default_loader)
    rows = read_table_text(files[0].content)
    assert len(rows) == 18
    assert rows[2][0] == "Topic: Camera Parts"


@pytest.mark.asyncio
async def test_loader_failure_falls_back_to_scratch(sample_plan):
    files = await generate_all_documents(sample_plan, loader=_broken_loader)
    assert len(files) == 5
    texts = docx_paragraph_texts(files[0].content)
    assert "DAY 1" in texts
    assert "Monday: Camera Parts" in texts


def test_fill_failure_falls_back_to_scratch_per_day(sample_plan):
    files = build_documents(sample_plan, b"not a docx", 3)
    assert len(files) == 5
    assert "Wednesday: Lighting & Tripods" in docx_paragraph_texts(files[1].content)


def test_handout_failure_is_skipped(sample_plan, monkeypatch):
    real = generator.generate_student_handout

    def flaky(handout, theme=None):
        if handout.name == "Exposure Worksheet":
            raise ValueError("boom")
        return real(handout, theme=theme)

    monkeypatch.setattr(generator, "generate_student_handout", flaky)
    files = build_documents(sample_plan, None, 3)
    names = [f.name for f in files]
    assert "Camera_Parts_Lighting_Gui_StudentHandout.docx" in names
    assert "Exposure_Worksheet_StudentHandout.docx" not in names
    assert len(files) == 4


def test_duplicate_names_get_suffixes():
    plan = make_plan(
        days=[DayPlan(topic="Review"), DayPlan(topic="Review")],
        student_handouts=[{"name": "Quiz"}, {"name": "Quiz"}, {"name": "Quiz"}],
    )
    names = [f.name for f in build_documents(plan, None, 3)]
    assert "Week03_Day1_Review.docx" in names
    assert "Week03_Day2_Review.docx" in names
    assert names[-3:] == [
        "Quiz_StudentHandout.docx",
        "Quiz_StudentHandout_2.docx",
        "Quiz_StudentHandout_3.docx",
    ]
    assert len(set(names)) == len(names)


@pytest.mark.asyncio
async def test_missing_week_number_defaults_to_one():
    plan = make_plan(week="final", student_handouts=None)
    files = await generate_all_documents(plan, loader=_broken_loader)
    assert files[0].name == "Week01_Day1_Camera_Parts.docx"
    assert files[-1].name == "Week1_Camera_Fundamentals_TeacherHandout.docx"


def test_generation_is_deterministic(sample_plan, default_template):
    first = build_documents(sample_plan, default_template, 3)
    second = build_documents(sample_plan, default_template, 3)
    assert [f.content for f in first] == [f.content for f in second]


@pytest.mark.asyncio
async def test_control_characters_in_plan_text_still_generate():
    plan = make_plan(
        days=[DayPlan(topic="Camera\x0bBasics", teacher_notes="Charge\x00 batteries")],
        teacher_notes=["bring\x0bcables"],
    )
    files = await generate_all_documents(plan, loader=_default_loader)

    names = [f.name for f in files]
    assert names[:2] == [
        "Week03_Day1_Camera_Basics.docx",
        "Week3_Camera_Fundamentals_TeacherHandout.docx",
    ]
    assert len(files) == 4
    assert read_table_text(files[0].content)[2][0] == "Topic: Camera\nBasics"
    assert "cables" in docx_text(files[1].content)


@pytest.mark.asyncio
async def test_control_characters_without_template():
    plan = make_plan(days=[DayPlan(topic="Camera\x0bBasics")])
    files = await generate_all_documents(plan, loader=_broken_loader)
    assert files[0].name == "Week03_Day1_Camera_Basics.docx"
    assert is_docx_archive(files[0].content)


def test_teacher_handout_failure_keeps_other_documents(sample_plan, monkeypatch):
    def broken(lesson_plan, week_number, theme=None):
        raise ValueError("boom")

    monkeypatch.setattr(generator, "generate_teacher_handout", broken)
    files = build_documents(sample_plan, None, 3)
    assert [f.type for f in files] == [
        FileType.LESSON_PLAN,
        FileType.LESSON_PLAN,
        FileType.STUDENT_HANDOUT,
        FileType.STUDENT_HANDOUT,
    ]


def test_day_failing_both_strategies_is_skipped(sample_plan, monkeypatch):
    real = generator.generate_daily_plan

    def flaky(day, *args, **kwargs):
        if day.topic == "Camera Parts":
            raise ValueError("boom")
        return real(day, *args, **kwargs)

    monkeypatch.setattr(generator, "generate_daily_plan", flaky)
    files = build_documents(sample_plan, b"not a docx", 3)
    names = [f.name for f in files]
    assert "Week03_Day1_Camera_Parts.docx" not in names
    assert names[0] == "Week03_Day2_Lighting___Tripods.docx"
    assert len(files) == 4


def test_scratch_day_uses_week_standards(sample_plan):
    files = build_documents(sample_plan, None, 3)
    # day 2 has no content standards of its own
    assert "State AV standards 1.1-1.4" in docx_paragraph_texts(files[1].content)
