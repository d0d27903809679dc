"""
Template management endpoints.

GET  /api/templates/                 List the bundled and stored templates
POST /api/templates/upload           Store a .docx template and validate its layout
GET  /api/templates/{id}/validate    Check a template against the CTE layout
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from lessondocs.config import settings
from lessondocs.dependencies.templates import get_store
from lessondocs.models.schemas import (
    TemplateInfo,
    TemplateUploadResponse,
    TemplateValidationResponse,
)
from lessondocs.services.template_filler import InvalidTemplateError, TemplateReport, validate_template
from lessondocs.services.template_loader import (
    TemplateStore,
    is_valid_template_id,
    load_default_template,
)
from lessondocs.utils.helpers import is_docx_archive, slugify

logger = logging.getLogger(__name__)

router = APIRouter()


def _validation_response(template_id: str, report: TemplateReport) -> TemplateValidationResponse:
    return TemplateValidationResponse(
        template_id=template_id,
        row_count=report.row_count,
        is_valid=report.is_valid,
        missing_fields=report.missing_fields,
        missing_labels=report.missing_labels,
    )


# ---------------------------------------------------------------------------
# List
# ---------------------------------------------------------------------------

@router.get("/", response_model=List[TemplateInfo])
async def list_templates(store: TemplateStore = Depends(get_store)) -> List[TemplateInfo]:
    """The bundled template first, then every stored template by id."""
    templates = [
        TemplateInfo(
            template_id=settings.DEFAULT_TEMPLATE_ID,
            size_bytes=len(load_default_template()),
            is_default=True,
        )
    ]
    templates.extend(
        TemplateInfo(template_id=template_id, size_bytes=size)
        for template_id, size in store.list_templates()
    )
    return templates


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

@router.post(
    "/upload",
    response_model=TemplateUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_template(
    file: UploadFile = File(...),
    template_id: Optional[str] = Form(None),
    store: TemplateStore = Depends(get_store),
) -> TemplateUploadResponse:
    """
    Upload a .docx template.

    - Max file size: 10 MB (configurable via MAX_TEMPLATE_SIZE)
    - The id defaults to a slug of the filename
    - The layout is validated and reported, but a mismatch does not reject
      the upload; generation falls back to scratch documents for it
    """
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Upload must include a filename.",
        )

    file_ext = Path(file.filename).suffix.lower()
    if file_ext != ".docx":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type '{file_ext}'. Accepted: .docx",
        )

    template_id = template_id or slugify(Path(file.filename).stem).lower().replace("_", "-")
    if not is_valid_template_id(template_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid template id '{template_id}'. Use letters, digits, '-' and '_'.",
        )
    if template_id == settings.DEFAULT_TEMPLATE_ID:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"'{template_id}' is reserved for the bundled template.",
        )

    # Read in slices while enforcing the size limit
    chunks = []
    file_size = 0
    while True:
        chunk = await file.read(1024 * 1024)   # 1 MB slices
        if not chunk:
            break
        file_size += len(chunk)
        if file_size > settings.MAX_TEMPLATE_SIZE:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=(
                    f"File exceeds the {settings.MAX_TEMPLATE_SIZE // (1024 * 1024)} MB "
                    "size limit."
                ),
            )
        chunks.append(chunk)
    data = b"".join(chunks)

    if not is_docx_archive(data):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File is not a valid DOCX document.",
        )

    try:
        report = validate_template(data)
    except InvalidTemplateError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    await store.put(template_id, data)
    logger.info(
        "Stored template %r from %r (%d bytes, valid=%s)",
        template_id, file.filename, file_size, report.is_valid,
    )

    return TemplateUploadResponse(
        template_id=template_id,
        filename=file.filename,
        size_bytes=file_size,
        validation=_validation_response(template_id, report),
        message=(
            "Template uploaded successfully"
            if report.is_valid
            else "Template uploaded, but it does not match the CTE layout"
        ),
    )


# ---------------------------------------------------------------------------
# Validate
# ---------------------------------------------------------------------------

@router.get("/{template_id}/validate", response_model=TemplateValidationResponse)
async def validate_stored_template(
    template_id: str,
    store: TemplateStore = Depends(get_store),
) -> TemplateValidationResponse:
    """Report missing schema fields and checkbox labels for a template."""
    if template_id == settings.DEFAULT_TEMPLATE_ID:
        data = load_default_template()
    else:
        if not is_valid_template_id(template_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid template id '{template_id}'.",
            )
        data = await store.get(template_id)
        if data is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Template '{template_id}' not found.",
            )

    try:
        report = validate_template(data)
    except InvalidTemplateError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))

    return _validation_response(template_id, report)
