"""
Pydantic schemas for request/response validation.
"""
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class FileType(str, Enum):
    """Kind of generated document."""

    LESSON_PLAN = "lesson_plan"
    TEACHER_HANDOUT = "teacher_handout"
    STUDENT_HANDOUT = "student_handout"
    PRESENTATION = "presentation"


# Generation Schemas
class GeneratedFileResponse(BaseModel):
    """One generated document, content base64-encoded."""

    name: str
    mime_type: str
    type: FileType
    size_bytes: int
    content_base64: str


class GenerationResponse(BaseModel):
    """Schema for the document generation response."""

    week: str
    unit: str
    template_id: Optional[str] = None
    file_count: int
    files: List[GeneratedFileResponse] = Field(default_factory=list)


# Template Schemas
class TemplateValidationResponse(BaseModel):
    """Result of checking a template against the positional schema."""

    template_id: str
    row_count: int
    is_valid: bool
    missing_fields: List[str] = Field(default_factory=list)
    missing_labels: Dict[str, List[str]] = Field(default_factory=dict)


class TemplateUploadResponse(BaseModel):
    """Schema for template upload response."""

    template_id: str
    filename: str
    size_bytes: int
    validation: TemplateValidationResponse
    message: str = "Template uploaded successfully"


class TemplateInfo(BaseModel):
    template_id: str
    size_bytes: int
    is_default: bool = False


# Health Check
class HealthCheckResponse(BaseModel):
    """Schema for health check response."""

    status: str
    default_template: str
    template_storage: str
    timestamp: datetime
