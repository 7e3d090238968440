"""
VoiceNote Backend — Notion Page Publisher
==========================================

What:  Creates one Notion page (title + polished text) in a caller-chosen database.
How:   POST {notion_api_base}/pages with the caller's own token. The token is
       an explicit argument of every call; the service holds no credential.
Who:   Called by NoteService as the last stage of POST /api/create-note.

Notion error codes → our taxonomy:
    unauthorized       → AuthFailedError        (401)
    object_not_found   → TargetNotFoundError    (404)
    validation_error   → NotionValidationError  (400, remote message)
    anything else      → PublishFailedError     (500)
"""

import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from app.config import settings
from app.exceptions import (
    AuthFailedError,
    NotionValidationError,
    PublishFailedError,
    TargetNotFoundError,
)
from app.models.note import PolishedNote, PublishedPage, WorkspaceCredentials

logger = logging.getLogger(__name__)

# Notion rejects rich-text segments longer than this
RICH_TEXT_LIMIT = 2000


def split_rich_text(text: str, limit: int = RICH_TEXT_LIMIT) -> List[Dict[str, Any]]:
    """Split `text` into consecutive rich-text segments of at most `limit` characters."""
    chunks = [text[i:i + limit] for i in range(0, len(text), limit)] or [""]
    return [{"type": "text", "text": {"content": chunk}} for chunk in chunks]


def build_page_payload(database_id: str, note: PolishedNote) -> Dict[str, Any]:
    """
    Page body: the title goes into the database's title property, the text
    into a single paragraph block.
    """
    return {
        "parent": {"database_id": database_id},
        "properties": {
            "title": {
                "title": [{"text": {"content": note.title}}],
            },
        },
        "children": [
            {
                "object": "block",
                "type": "paragraph",
                "paragraph": {"rich_text": split_rich_text(note.text)},
            },
        ],
    }


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class NotionService:
    """
    Thin async client for the Notion pages endpoint.

    Args:
        transport: Optional httpx transport (tests inject httpx.MockTransport).
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    def _client(self, api_key: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=settings.notion_api_base,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Notion-Version": settings.notion_version,
                "Content-Type": "application/json",
            },
            timeout=settings.http_timeout,
            transport=self._transport,
        )

    async def create_page(
        self,
        credentials: WorkspaceCredentials,
        note: PolishedNote,
    ) -> PublishedPage:
        """
        Create the page and return its URL.

        Raises:
            AuthFailedError, TargetNotFoundError, NotionValidationError,
            PublishFailedError
        """
        payload = build_page_payload(credentials.database_id, note)
        start = time.perf_counter()

        try:
            async with self._client(credentials.api_key) as client:
                response = await client.post("/pages", json=payload)
        except httpx.HTTPError as e:
            logger.error("Notion request failed: %s", e)
            raise PublishFailedError(
                message="Could not reach Notion. Please try again later.",
                context={"error_type": type(e).__name__},
            ) from e

        duration_ms = (time.perf_counter() - start) * 1000

        if response.is_success:
            page = _json_body(response)
            url = page.get("url")
            if not isinstance(url, str) or not url:
                logger.error(
                    "Notion answered %d without a page URL in %.0fms",
                    response.status_code, duration_ms,
                )
                raise PublishFailedError(
                    message="Notion did not return a page URL",
                    context={"remote_status": response.status_code},
                )
            logger.info("Notion page created in %.0fms", duration_ms)
            return PublishedPage(
                url=url,
                title=note.title,
                text=note.text,
                page_id=page.get("id"),
            )

        body = _json_body(response)
        code = body.get("code")
        remote_message = body.get("message")
        logger.error(
            "Notion page creation failed in %.0fms: status=%d code=%s message=%s",
            duration_ms, response.status_code, code, remote_message,
        )
        context = {"remote_status": response.status_code, "remote_code": code}

        if code == "unauthorized":
            raise AuthFailedError(context=context)
        if code == "object_not_found":
            raise TargetNotFoundError(context=context)
        if code == "validation_error":
            raise NotionValidationError(message=remote_message, context=context)
        raise PublishFailedError(message=remote_message, context=context)


# ── Singleton Instance ────────────────────────────────────────────────────
notion_service = NotionService()
