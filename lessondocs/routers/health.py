"""
Health check endpoint.
"""
from datetime import datetime
import logging

from fastapi import APIRouter

from lessondocs.config import settings
from lessondocs.models.schemas import HealthCheckResponse
from lessondocs.services.template_filler import validate_template
from lessondocs.services.template_loader import load_default_template

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthCheckResponse)
async def health_check():
    """
    Health check endpoint to verify system status.

    Returns:
        HealthCheckResponse with status of the bundled template and template storage
    """
    # Bundled template must load and match the CTE layout
    template_status = "ok"
    try:
        report = validate_template(load_default_template())
        if not report.is_valid:
            logger.error(
                "Default template does not match the CTE layout: %s %s",
                report.missing_fields, report.missing_labels,
            )
            template_status = "invalid"
    except Exception as e:
        logger.error(f"Default template health check failed: {e}")
        template_status = "error"

    storage_status = "remote" if settings.TEMPLATE_STORAGE_URL else "local"

    overall_status = "healthy" if template_status == "ok" else "degraded"

    return HealthCheckResponse(
        status=overall_status,
        default_template=template_status,
        template_storage=storage_status,
        timestamp=datetime.utcnow()
    )
