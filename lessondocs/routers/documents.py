"""
Document generation endpoints.

POST /api/documents/generate          Generate every document, returned as base64 JSON
POST /api/documents/generate/archive  Same documents bundled into one ZIP download
"""
from __future__ import annotations

import base64
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from lessondocs.dependencies.templates import get_loader
from lessondocs.models.lesson import LessonPlanInput
from lessondocs.models.schemas import GeneratedFileResponse, GenerationResponse
from lessondocs.services.generator import generate_all_documents
from lessondocs.services.template_loader import TemplateLoader
from lessondocs.utils.helpers import parse_week_number, rezip

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Generate
# ---------------------------------------------------------------------------

@router.post("/generate", response_model=GenerationResponse)
async def generate_documents(
    lesson_plan: LessonPlanInput,
    template_id: Optional[str] = Query(None, description="Stored template id; omit for the bundled CTE template"),
    loader: TemplateLoader = Depends(get_loader),
) -> GenerationResponse:
    """
    Generate the daily lesson plans, the teacher handout and the student handouts.

    - Days whose template fill fails are generated from scratch
    - Student handouts that fail are skipped and logged
    """
    files = await generate_all_documents(lesson_plan, template_id, loader=loader.load)

    return GenerationResponse(
        week=lesson_plan.week,
        unit=lesson_plan.unit,
        template_id=template_id,
        file_count=len(files),
        files=[
            GeneratedFileResponse(
                name=f.name,
                mime_type=f.mime_type,
                type=f.type,
                size_bytes=f.size_bytes,
                content_base64=base64.b64encode(f.content).decode("ascii"),
            )
            for f in files
        ],
    )


@router.post(
    "/generate/archive",
    response_class=Response,
    responses={200: {"content": {"application/zip": {}}}},
)
async def generate_documents_archive(
    lesson_plan: LessonPlanInput,
    template_id: Optional[str] = Query(None, description="Stored template id; omit for the bundled CTE template"),
    loader: TemplateLoader = Depends(get_loader),
) -> Response:
    """Generate every document and return them as a single ZIP archive."""
    files = await generate_all_documents(lesson_plan, template_id, loader=loader.load)

    week_number = parse_week_number(lesson_plan.week) or 1
    archive_name = f"Week{week_number:02d}_LessonDocuments.zip"
    archive = rezip((f.name, f.content) for f in files)

    logger.info("Bundled %d files into %s (%d bytes)", len(files), archive_name, len(archive))
    return Response(
        content=archive,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{archive_name}"'},
    )
