"""Lesson plan input models and API schemas."""
from lessondocs.models.lesson import (
    DayPlan,
    Differentiation,
    HandoutSection,
    LessonPlanInput,
    ScheduleItem,
    StudentHandout,
)
from lessondocs.models.schemas import (
    FileType,
    GeneratedFileResponse,
    GenerationResponse,
    HealthCheckResponse,
    TemplateInfo,
    TemplateUploadResponse,
    TemplateValidationResponse,
)

__all__ = [
    # Lesson input models
    "DayPlan",
    "Differentiation",
    "HandoutSection",
    "LessonPlanInput",
    "ScheduleItem",
    "StudentHandout",
    # Pydantic schemas
    "FileType",
    "GeneratedFileResponse",
    "GenerationResponse",
    "HealthCheckResponse",
    "TemplateInfo",
    "TemplateUploadResponse",
    "TemplateValidationResponse",
]
