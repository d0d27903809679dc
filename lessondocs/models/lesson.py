"""
Lesson plan input models.

These mirror the structured object produced by the lesson-generation step and
are consumed, read-only, by the document generators.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ScheduleItem(BaseModel):
    """One timed activity in a day's schedule."""

    time: str = ""
    name: str = ""
    description: str = ""


class Differentiation(BaseModel):
    """Strategies for the three learner groups; unused slots are empty strings."""

    advanced: str = Field("", alias="Advanced")
    struggling: str = Field("", alias="Struggling")
    ell: str = Field("", alias="ELL")

    model_config = ConfigDict(populate_by_name=True)

    def is_empty(self) -> bool:
        return not (self.advanced or self.struggling or self.ell)


class DayPlan(BaseModel):
    """A single day of instruction."""

    topic: str
    day_label: Optional[str] = None
    overview: Optional[str] = None
    objectives: List[str] = Field(default_factory=list)
    day_materials: List[str] = Field(default_factory=list)
    schedule: List[ScheduleItem] = Field(default_factory=list)
    vocabulary: Dict[str, str] = Field(default_factory=dict)
    differentiation: Differentiation = Field(default_factory=Differentiation)
    teacher_notes: str = ""
    content_standards: str = ""
    # Explicit checkbox keys; merged with the inferred selections
    materials: Optional[List[str]] = None
    methods: Optional[List[str]] = None
    assessment: Optional[List[str]] = None


class HandoutSection(BaseModel):
    heading: str = ""
    numbered: bool = False
    items: List[str] = Field(default_factory=list)
    content: Optional[str] = None
    blank_lines: Optional[int] = Field(None, ge=0)


class StudentHandout(BaseModel):
    """A printable handout given to students."""

    name: str
    title: str = ""
    subtitle: str = ""
    instructions: str = ""
    sections: List[HandoutSection] = Field(default_factory=list)
    vocabulary: Optional[Dict[str, str]] = None
    questions: Optional[List[str]] = None
    tips: Optional[List[str]] = None


class LessonPlanInput(BaseModel):
    """
    Week-level lesson plan.

    ``days`` is ordered (Monday first) and must contain at least one entry.
    """

    week: str
    unit: str = ""
    week_focus: str = ""
    week_overview: str = ""
    week_objectives: List[str] = Field(default_factory=list)
    week_materials: List[str] = Field(default_factory=list)
    formative_assessment: str = ""
    summative_assessment: str = ""
    weekly_deliverable: str = ""
    days: List[DayPlan] = Field(..., min_length=1)
    vocabulary_summary: Optional[Dict[str, str]] = None
    teacher_notes: Optional[List[str]] = None
    standards_alignment: str = ""
    student_handouts: Optional[List[StudentHandout]] = None
    skip_presentations: bool = False
    course_title: Optional[str] = None
    class_duration: Optional[int] = Field(None, gt=0)
