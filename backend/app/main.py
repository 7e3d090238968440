"""
VoiceNote Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn app.main:app), or via
       the `voicenote-server` console script (run()).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────┐ ┌─────────────┐ ┌──────┐                   │
    │  │  Req ID  │→│ Access Log  │→│ CORS │                   │
    │  └──────────┘ └─────────────┘ └──────┘                   │
    │                                                          │
    │  Routes:                                                 │
    │  POST /api/transcribe   POST /api/create-note            │
    │  GET  /api/notion/callback   GET /   GET /health         │
    │                                                          │
    │  Exception Handlers (error normalizer):                  │
    │  VoiceNoteError → its status │ RequestValidation → 400   │
    │  anything else  → 500                                    │
    └──────────────────────────────────────────────────────────┘

Every error response has the shape {"error": <kind label>, "message": <text>}.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.exceptions import VoiceNoteError
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import health, notes, notion_auth, transcribe

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Warn about missing credentials (the server still starts)
        3. Ensure the transient upload directory exists
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("VoiceNote Backend %s starting up...", __version__)

    missing = settings.missing_credentials()
    if missing:
        logger.warning(
            "Missing configuration: %s. Endpoints that need them will return 500.",
            ", ".join(missing),
        )

    from pathlib import Path
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Transient upload directory: %s", upload_dir.resolve())
    logger.info("OAuth redirect URI: %s", settings.redirect_uri)
    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    logger.info("VoiceNote Backend shutting down...")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map every failure to a `{error, message}` response.

    Handler hierarchy:
        VoiceNoteError          → exc.status_code (taxonomy in app/exceptions.py)
        RequestValidationError  → 400 (malformed JSON body or form data)
        Exception (fallback)    → 500 (unexpected errors; details logged only)
    """

    @app.exception_handler(VoiceNoteError)
    async def handle_voicenote_error(request: Request, exc: VoiceNoteError):
        rid = request_id_var.get("")
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "[%s] %s (%d): %s | Context: %s",
            rid, exc.error, exc.status_code, exc.message, exc.context,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = first.get("msg", "Request could not be parsed")
        message = f"{location}: {detail}" if location else detail
        logger.warning("[%s] Request validation error: %s", rid, message)
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "message": message},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, exc, exc_info=True)
        # Unhandled errors skip RequestIDMiddleware on the way out
        return JSONResponse(
            status_code=500,
            headers={"X-Request-ID": rid} if rid else None,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred",
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="VoiceNote API",
        description=(
            "Transcribe voice recordings, polish them into readable notes and "
            "publish them as Notion pages."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(transcribe.router)
    app.include_router(notes.router)
    app.include_router(notion_auth.router)
    app.include_router(health.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn on the configured port."""
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
