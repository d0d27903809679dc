"""
Shared fixtures for lesson document tests.

Documents are generated in memory; the only filesystem use is a temporary
template store per test, injected into the app by overriding the store
dependency.
"""
from __future__ import annotations

import io
from typing import AsyncGenerator, List

import pytest
import pytest_asyncio
from docx import Document
from httpx import ASGITransport, AsyncClient

from lessondocs.dependencies.templates import get_store
from lessondocs.main import app
from lessondocs.models.lesson import LessonPlanInput
from lessondocs.services.template_loader import LocalTemplateStore, load_default_template


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

SAMPLE_PLAN = {
    "week": "Week 3",
    "unit": "Camera Fundamentals",
    "week_focus": "Exposure and framing",
    "week_overview": "Students learn the exposure triangle and basic shot composition.",
    "week_objectives": [
        "Identify the parts of a DSLR camera",
        "Explain aperture, shutter speed and ISO",
        "Frame shots using the rule of thirds",
    ],
    "week_materials": ["DSLR cameras", "Tripods", "SD cards"],
    "formative_assessment": "Exit tickets",
    "summative_assessment": "Camera skills quiz",
    "weekly_deliverable": "Three-shot photo series",
    "days": [
        {
            "topic": "Camera Parts",
            "objectives": ["Students will identify the lens, body and sensor"],
            "day_materials": ["DSLR cameras", "Camera diagram handout"],
            "schedule": [
                {"time": "0:00-0:10", "name": "Warm-up", "description": "Journal prompt"},
                {"time": "0:10-0:40", "name": "Direct Instruction", "description": "Slides on camera anatomy"},
                {"time": "0:40-0:90", "name": "Lab", "description": "Teams label camera parts"},
            ],
            "vocabulary": {"Aperture": "Lens opening", "Sensor": "Captures light", "Lens": "Focuses light"},
            "differentiation": {
                "Advanced": "Compare sensor sizes",
                "Struggling": "Labeled diagram",
                "ELL": "Bilingual glossary",
            },
            "teacher_notes": "Check batteries before class.",
            "content_standards": "AV.1.2 Identify camera components",
        },
        {
            "topic": "Lighting & Tripods",
            "day_label": "Wednesday",
            "objectives": ["To set up three-point lighting"],
            "schedule": [
                {"time": "0:00-0:30", "name": "Demonstration", "description": "Tripod and lighting setup"},
            ],
            "differentiation": {"Advanced": "", "Struggling": "", "ELL": ""},
        },
    ],
    "teacher_notes": ["Reserve the studio for Wednesday"],
    "standards_alignment": "State AV standards 1.1-1.4",
    "student_handouts": [
        {
            "name": "Camera Parts & Lighting Guide!!",
            "title": "Camera Parts",
            "subtitle": "Week 3",
            "instructions": "Answer every question.",
            "sections": [
                {"heading": "The Body", "content": "The body holds the sensor.", "items": ["Shutter", "Mirror"]},
                {"heading": "Steps", "numbered": True, "items": ["Remove cap", "Power on"], "blank_lines": 2},
            ],
            "vocabulary": {"ISO": "Sensor sensitivity"},
            "questions": ["What does the aperture control?", "Why use a tripod?"],
            "tips": ["Always use the neck strap"],
        },
        {"name": "Exposure Worksheet", "title": "Exposure"},
    ],
}

# Every text field of the first day carries a distinct marker
SENTINEL_PLAN = {
    "week": "SENTINEL_WEEK",
    "unit": "SENTINEL_UNIT",
    "course_title": "SENTINEL_COURSE",
    "class_duration": 47,
    "days": [
        {
            "topic": "SENTINEL_TOPIC",
            "overview": "SENTINEL_OVERVIEW",
            "objectives": ["SENTINEL_OBJECTIVE"],
            "schedule": [
                {"time": "SENTINEL_TIME", "name": "SENTINEL_ACTIVITY", "description": "SENTINEL_DESC"},
                {"time": "T2", "name": "SENTINEL_SECOND", "description": ""},
            ],
            "differentiation": {
                "Advanced": "SENTINEL_ADVANCED",
                "Struggling": "SENTINEL_STRUGGLING",
                "ELL": "SENTINEL_ELL",
            },
            "content_standards": "SENTINEL_STANDARDS",
        }
    ],
}


def make_plan(**overrides) -> LessonPlanInput:
    """The sample plan with top-level fields replaced."""
    data = dict(SAMPLE_PLAN)
    data.update(overrides)
    return LessonPlanInput.model_validate(data)


def docx_paragraph_texts(content: bytes) -> List[str]:
    """Every paragraph's text, body and table cells included, in document order."""
    doc = Document(io.BytesIO(content))
    texts = []
    body = doc.element.body
    for paragraph in body.iter("{http://schemas.openxmlformats.org/wordprocessingml/2006/main}p"):
        texts.append("".join(
            t.text or ""
            for t in paragraph.iter("{http://schemas.openxmlformats.org/wordprocessingml/2006/main}t")
        ))
    return texts


def docx_text(content: bytes) -> str:
    return "\n".join(docx_paragraph_texts(content))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_plan() -> LessonPlanInput:
    return LessonPlanInput.model_validate(SAMPLE_PLAN)


@pytest.fixture
def sentinel_plan() -> LessonPlanInput:
    return LessonPlanInput.model_validate(SENTINEL_PLAN)


@pytest.fixture
def default_template() -> bytes:
    return load_default_template()


@pytest.fixture
def template_store(tmp_path) -> LocalTemplateStore:
    return LocalTemplateStore(str(tmp_path / "templates"))


@pytest_asyncio.fixture
async def client(template_store: LocalTemplateStore) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app with the template store
    overridden to use a per-test directory.
    """
    app.dependency_overrides[get_store] = lambda: template_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
