"""
VoiceNote Backend — Create Note Route Handler
==============================================

What:  Handles POST /api/create-note.
How:   Parses the JSON body and delegates polish → title → publish to NoteService.
Who:   Called by the client after it has a transcription (from /api/transcribe
       or typed by the user).

The Notion token arrives in the body and is used for this one request only.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body

from app.schemas.note import CreateNoteRequest, CreateNoteResponse, ErrorResponse
from app.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])


@router.post(
    "/create-note",
    response_model=CreateNoteResponse,
    responses={
        400: {"description": "Missing field or Notion validation error", "model": ErrorResponse},
        401: {"description": "Notion rejected the API key", "model": ErrorResponse},
        404: {"description": "Notion database not found", "model": ErrorResponse},
        500: {"description": "Misconfiguration or upstream failure", "model": ErrorResponse},
    },
    summary="Polish a transcription and publish it to Notion",
)
async def create_note(
    body: Optional[CreateNoteRequest] = Body(default=None),
) -> CreateNoteResponse:
    # A missing body is reported field by field, like an empty object
    page = await note_service.create_note(body or CreateNoteRequest())
    return CreateNoteResponse(
        notion_page_url=page.url,
        title=page.title,
        polished_text=page.text,
    )
