"""
VoiceNote Backend — Liveness & Health Routes
=============================================

What:  GET / (plain-text liveness) and GET /health (configuration status).
How:   Neither route calls a remote service; /health only reports which
       credentials are configured.

Status levels:
    - healthy:   Gemini and Notion OAuth credentials present
    - degraded:  At least one credential missing; affected endpoints answer 500
"""

import time

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from app import __version__
from app.config import settings
from app.schemas.note import HealthResponse

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_class=PlainTextResponse, summary="Liveness probe")
async def root() -> str:
    return "VoiceNote backend is running"


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check() -> HealthResponse:
    gemini_ok = settings.is_gemini_configured
    notion_ok = settings.is_notion_oauth_configured
    return HealthResponse(
        status="healthy" if gemini_ok and notion_ok else "degraded",
        version=__version__,
        gemini_configured=gemini_ok,
        notion_oauth_configured=notion_ok,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
