"""Tests for the scratch document generators."""
import io
import re
import zipfile

from docx import Document

from lessondocs.models.lesson import DayPlan, LessonPlanInput, StudentHandout
from lessondocs.services.daily_plan import generate_daily_plan
from lessondocs.services.student_handout import generate_student_handout, student_handout_filename
from lessondocs.services.teacher_handout import (
    day_name,
    generate_teacher_handout,
    teacher_handout_filename,
)
from tests.conftest import docx_paragraph_texts, docx_text, make_plan


def _page_breaks(content: bytes) -> int:
    with zipfile.ZipFile(io.BytesIO(content)) as zf:
        xml = zf.read("word/document.xml").decode("utf-8")
    return len(re.findall(r'<w:br w:type="page"/>', xml))


# ---------------------------------------------------------------------------
# Teacher handout
# ---------------------------------------------------------------------------

def test_teacher_handout_sections_in_order(sample_plan):
    texts = docx_paragraph_texts(generate_teacher_handout(sample_plan, 3))
    expected = [
        "WEEK 3: CAMERA FUNDAMENTALS",
        "Week Overview",
        "Focus: Exposure and framing",
        "Weekly Learning Objectives",
        "Materials Needed for the Week",
        "[ ] Tripods",
        "Assessment Overview",
        "DAY 1",
        "Monday: Camera Parts",
        "Schedule",
        "Vocabulary",
        "Teacher Notes",
        "DAY 2",
        "Wednesday: Lighting & Tripods",
        "Weekly Teacher Notes",
    ]
    positions = [texts.index(text) for text in expected]
    assert positions == sorted(positions)


def test_teacher_handout_week_vocabulary():
    plan = make_plan(vocabulary_summary={"Aperture": "Lens opening", "ISO": "Sensor sensitivity"})
    texts = docx_paragraph_texts(generate_teacher_handout(plan, 3))
    start = texts.index("Key Vocabulary")
    assert texts.index("Weekly Learning Objectives") < start < texts.index("Materials Needed for the Week")
    assert "Lens opening" in texts[start:]
    assert "Key Vocabulary" not in docx_paragraph_texts(generate_teacher_handout(make_plan(), 3))


def test_teacher_handout_page_break_per_day_and_notes(sample_plan):
    content = generate_teacher_handout(sample_plan, 3)
    # one before day 2, one before the weekly notes
    assert _page_breaks(content) == 2


def test_teacher_handout_omits_empty_sections(sample_plan):
    texts = docx_paragraph_texts(generate_teacher_handout(sample_plan, 3))
    # only day 1 has differentiation strategies
    assert texts.count("Differentiation") == 1

    minimal = LessonPlanInput(week="1", days=[DayPlan(topic="Intro")])
    text = docx_text(generate_teacher_handout(minimal, 1))
    assert "DAY 1" in text
    for heading in ("Week Overview", "Weekly Learning Objectives", "Assessment Overview",
                    "Schedule", "Vocabulary", "Weekly Teacher Notes"):
        assert heading not in text
    assert _page_breaks(generate_teacher_handout(minimal, 1)) == 0


def test_teacher_handout_is_deterministic(sample_plan):
    assert generate_teacher_handout(sample_plan, 3) == generate_teacher_handout(sample_plan, 3)


def test_teacher_handout_margins(sample_plan):
    doc = Document(io.BytesIO(generate_teacher_handout(sample_plan, 3)))
    assert round(doc.sections[0].left_margin.inches, 2) == 0.5


def test_day_name_fallbacks():
    assert day_name(DayPlan(topic="x"), 0) == "Monday"
    assert day_name(DayPlan(topic="x", day_label="Lab Day"), 0) == "Lab Day"
    assert day_name(DayPlan(topic="x"), 5) == "Day 6"


def test_teacher_handout_filename(sample_plan):
    assert teacher_handout_filename(sample_plan, 3) == "Week3_Camera_Fundamentals_TeacherHandout.docx"
    assert teacher_handout_filename(make_plan(unit=""), 3) == "Week3_Unit_TeacherHandout.docx"


# ---------------------------------------------------------------------------
# Student handout
# ---------------------------------------------------------------------------

def test_student_handout_content(sample_plan):
    handout = sample_plan.student_handouts[0]
    texts = docx_paragraph_texts(generate_student_handout(handout))
    expected = [
        "Camera Parts",
        "Week 3",
        "Instructions",
        "Answer every question.",
        "The Body",
        "The body holds the sensor.",
        "Shutter",
        "Steps",
        "Remove cap",
        "Questions",
        "1. What does the aperture control?",
        "2. Why use a tripod?",
        "Vocabulary",
        "ISO",
        "Tips & Notes",
        "Always use the neck strap",
    ]
    positions = [texts.index(text) for text in expected]
    assert positions == sorted(positions)


def test_student_handout_minimal():
    handout = StudentHandout(name="Exposure Worksheet", title="Exposure")
    text = docx_text(generate_student_handout(handout))
    assert "Exposure" in text
    for heading in ("Instructions", "Questions", "Vocabulary", "Tips & Notes"):
        assert heading not in text


def test_student_handout_margins_and_determinism(sample_plan):
    handout = sample_plan.student_handouts[0]
    content = generate_student_handout(handout)
    assert content == generate_student_handout(handout)
    doc = Document(io.BytesIO(content))
    assert round(doc.sections[0].left_margin.inches, 2) == 0.6


def test_student_handout_filename():
    name = student_handout_filename(StudentHandout(name="Camera Parts & Lighting Guide!!"))
    assert name.endswith("_StudentHandout.docx")
    slug = name[: -len("_StudentHandout.docx")]
    assert re.fullmatch(r"[A-Za-z0-9_]+", slug)
    assert len(slug) <= 25
    assert student_handout_filename(StudentHandout(name="???")) == "Handout_StudentHandout.docx"


# ---------------------------------------------------------------------------
# Scratch daily plan
# ---------------------------------------------------------------------------

def test_daily_plan_content(sample_plan):
    content = generate_daily_plan(sample_plan.days[0], 3, 1, sample_plan.unit)
    texts = docx_paragraph_texts(content)
    assert "DAY 1" in texts
    assert "Unit: Camera Fundamentals    Week: 3    Day: 1" in texts
    assert "Procedures" in texts
    assert "Warm-up" in texts
    assert "AV.1.2 Identify camera components" in texts
    assert content == generate_daily_plan(sample_plan.days[0], 3, 1, sample_plan.unit)


def test_daily_plan_synthesizes_overview():
    content = generate_daily_plan(DayPlan(topic="Framing"), 1, 2)
    texts = docx_paragraph_texts(content)
    assert "Tuesday: Framing" in texts
    assert "Students will learn about Framing." in texts
    assert "Procedures" not in texts


def test_daily_plan_falls_back_to_week_standards(sample_plan):
    day = sample_plan.days[1]
    texts = docx_paragraph_texts(
        generate_daily_plan(day, 3, 2, sample_plan.unit, standards=sample_plan.standards_alignment)
    )
    assert "Content Standards" in texts
    assert "State AV standards 1.1-1.4" in texts

    # the day's own standards win
    texts = docx_paragraph_texts(
        generate_daily_plan(sample_plan.days[0], 3, 1, standards="Week standards")
    )
    assert "AV.1.2 Identify camera components" in texts
    assert "Week standards" not in texts
