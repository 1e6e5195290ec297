"""
Main FastAPI application for the PLAAFP Assistant backend.
Handles CORS, request logging middleware, lifespan events, and router registration.
"""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import AsyncSessionLocal, close_db, init_db
from app.routers import assist, documents, form, health, preview, record
from app.services.assistant import OllamaAssistantService
from app.services.document_store import DocumentStore
from app.services.editor_session import editor_session, restore_session

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Startup / shutdown helpers
# ---------------------------------------------------------------------------

async def _check_database() -> bool:
    """Initialise DB tables and verify the connection.  Returns True on success."""
    try:
        await init_db()
        logger.info("✓ Database connection OK")
        return True
    except Exception as exc:
        logger.error("✗ Database connection failed: %s", exc)
        raise


async def _restore_open_document() -> None:
    """Reopen the document that was current at last shutdown, if any."""
    async with AsyncSessionLocal() as db:
        try:
            await restore_session(editor_session, DocumentStore(db))
            await db.commit()
        except Exception as exc:
            await db.rollback()
            logger.error("✗ Could not restore the open document: %s", exc)
            editor_session.reset()
            return

    if editor_session.document_id:
        logger.info(
            "✓ Restored document %s (%s)",
            editor_session.document_id,
            editor_session.record.student_name or "unnamed",
        )
    else:
        logger.info("✓ Starting with a blank document")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown event handler."""
    logger.info("=" * 60)
    logger.info("  Starting PLAAFP Assistant backend …")
    logger.info("=" * 60)

    # 1 — Database (required; raises on failure)
    await _check_database()

    # 2 — Saved session
    await _restore_open_document()

    # 3 — Ollama (optional; suggestions and extraction fail until it is up)
    if await OllamaAssistantService().check_health():
        logger.info("✓ Ollama reachable at %s", settings.OLLAMA_BASE_URL)
    else:
        logger.warning(
            "Ollama is not running.  Start it with: ollama serve\n"
            "  AI suggestions and screenshot extraction will be unavailable until Ollama is up."
        )

    logger.info("=" * 60)
    logger.info("  PLAAFP Assistant ready on http://%s:%d", settings.HOST, settings.PORT)
    logger.info("  Swagger UI : http://%s:%d/docs", settings.HOST, settings.PORT)
    logger.info("  Health     : http://%s:%d/api/health", settings.HOST, settings.PORT)
    logger.info("=" * 60)

    yield  # ← server is running

    logger.info("Shutting down PLAAFP Assistant backend …")
    await close_db()
    logger.info("✓ Shutdown complete.")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="PLAAFP Assistant API",
    description=(
        "**PLAAFP Assistant** — guided drafting of Present Levels of Academic "
        "Achievement and Functional Performance reports.\n\n"
        "Fill the structured record field by field, watch the rendered report "
        "update, edit the report directly and have those edits merged back, "
        "and ask a local model for suggestions or screenshot extraction.\n\n"
        "Key endpoints:\n"
        "- `PUT  /api/record/fields/{name}` — edit a field\n"
        "- `POST /api/record/sections/{list_kind}` — add an academic / summary section\n"
        "- `GET  /api/preview` — rendered, editable report\n"
        "- `POST /api/preview` — merge an edited report back into the record\n"
        "- `POST /api/documents/save` — save the open document\n"
        "- `POST /api/assist/suggestion` — AI suggestion for a field\n"
        "- `POST /api/assist/extract` — fill a field from a screenshot\n"
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
app.include_router(form.router,       prefix="/api/form",      tags=["Form"])
app.include_router(record.router,     prefix="/api/record",    tags=["Record"])
app.include_router(preview.router,    prefix="/api/preview",   tags=["Preview"])
app.include_router(documents.router,  prefix="/api/documents", tags=["Documents"])
app.include_router(assist.router,     prefix="/api/assist",    tags=["Assistant"])


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@app.get("/", tags=["Root"], include_in_schema=False)
async def root():
    """API root — returns basic service info."""
    return {
        "name": "PLAAFP Assistant API",
        "version": "0.1.0",
        "description": "PLAAFP report drafting backend",
        "docs": "/docs",
        "health": "/api/health",
        "endpoints": {
            "form": "/api/form",
            "record": "/api/record",
            "preview": "/api/preview",
            "documents": "/api/documents",
            "assist": "/api/assist",
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level="info",
    )
