"""
Main FastAPI application for the lesson document service.
Handles CORS, request logging middleware, lifespan events, and router registration.
"""
import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lessondocs.config import settings
from lessondocs.routers import documents, health, templates
from lessondocs.services.template_filler import validate_template
from lessondocs.services.template_loader import load_default_template

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Startup helpers
# ---------------------------------------------------------------------------

def _check_default_template() -> bool:
    """
    Package the bundled template and check it against the CTE layout.
    Returns True when it is usable.  Never raises - problems are logged and
    generation falls back to scratch documents.
    """
    try:
        report = validate_template(load_default_template())
    except Exception as exc:
        logger.error("✗ Default template unavailable (%s) - lesson plans will be scratch-generated", exc)
        return False

    if report.is_valid:
        logger.info("✓ Default template OK (%d table rows)", report.row_count)
        return True

    logger.warning(
        "⚠ Default template does not match the CTE layout: missing fields %s, missing labels %s",
        report.missing_fields,
        report.missing_labels,
    )
    return False


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown event handler."""
    logger.info("=" * 60)
    logger.info("  Starting lesson document service …")
    logger.info("=" * 60)

    # 1 - Bundled template (optional; logs warnings but continues)
    _check_default_template()

    # 2 - Template storage
    if settings.TEMPLATE_STORAGE_URL:
        logger.info("✓ Template storage: %s", settings.TEMPLATE_STORAGE_URL)
    else:
        os.makedirs(settings.TEMPLATE_STORAGE_DIR, exist_ok=True)
        logger.info("✓ Template directory: %s", os.path.abspath(settings.TEMPLATE_STORAGE_DIR))

    logger.info("=" * 60)
    logger.info("  Service ready on http://%s:%d", settings.HOST, settings.PORT)
    logger.info("  Swagger UI : http://%s:%d/docs", settings.HOST, settings.PORT)
    logger.info("  Health     : http://%s:%d/api/health", settings.HOST, settings.PORT)
    logger.info("=" * 60)

    yield  # ← server is running

    logger.info("✓ Shutdown complete.")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Lesson Docs API",
    description=(
        "**Lesson Docs** - CTE lesson plan document generation.\n\n"
        "Turn a structured weekly lesson plan into daily CTE lesson plans "
        "(filled into the district template), a weekly teacher handout and "
        "student handouts.\n\n"
        "Key endpoints:\n"
        "- `POST /api/documents/generate` - generate every document (base64 JSON)\n"
        "- `POST /api/documents/generate/archive` - generate every document as a ZIP\n"
        "- `POST /api/templates/upload` - upload a custom CTE template\n"
        "- `GET  /api/templates/{id}/validate` - check a template's layout\n"
    ),
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request / response logging middleware
# ---------------------------------------------------------------------------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every request with method, path, status code, and elapsed time.
    Attaches an ``X-Process-Time`` header (milliseconds) to every response.
    """
    t0 = time.monotonic()
    response = await call_next(request)
    elapsed_ms = round((time.monotonic() - t0) * 1000, 2)

    # Skip noisy health-check polling from the frontend
    if request.url.path not in ("/api/health", "/api/health/", "/"):
        logger.info(
            "%s %s → %d  (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )

    response.headers["X-Process-Time"] = f"{elapsed_ms}ms"
    return response


# ---------------------------------------------------------------------------
# Global exception handler
# ---------------------------------------------------------------------------

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return a structured JSON error for any unhandled exception."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error": str(exc),
            "path": str(request.url.path),
            "timestamp": datetime.utcnow().isoformat(),
        },
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(health.router,     prefix="/api/health",    tags=["Health"])
app.include_router(documents.router,  prefix="/api/documents", tags=["Documents"])
app.include_router(templates.router,  prefix="/api/templates", tags=["Templates"])


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@app.get("/", tags=["Root"], include_in_schema=False)
async def root():
    """API root - returns basic service info."""
    return {
        "name": "Lesson Docs API",
        "version": "0.1.0",
        "description": "CTE Lesson Plan Document Generation",
        "docs": "/docs",
        "health": "/api/health",
        "endpoints": {
            "generate": "/api/documents/generate",
            "archive": "/api/documents/generate/archive",
            "templates": "/api/templates",
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "lessondocs.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level="info",
    )
