"""
VoiceNote Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Test environment variables are set BEFORE any app module is
       imported, so the `settings` singleton is built from them.

Fixture Hierarchy (all function-scoped):
    ├── temp_storage: Temporary directory for transient audio files
    ├── sample_wav_bytes: 2 KiB fake WAV payload
    ├── mock_genai: Patched google.generativeai module
    ├── gemini_response: Fake Gemini response factory
    ├── mock_transport: httpx.MockTransport recording Notion calls
    └── test_client: HTTPX AsyncClient for API endpoint testing
"""

import json
import os
import tempfile
from typing import Callable, List
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["NOTION_CLIENT_ID"] = "test-client-id"
os.environ["NOTION_CLIENT_SECRET"] = "test-client-secret"
os.environ["NOTION_REDIRECT_URI"] = ""
os.environ["PORT"] = "8080"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="voicenote_test_")
os.environ["LOG_LEVEL"] = "WARNING"


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "uploads"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_wav_bytes():
    """
    2 KiB of bytes starting with a RIFF/WAVE header.

    Not playable audio; intake only checks the declared type and size.
    """
    header = b"RIFF\x24\x08\x00\x00WAVEfmt "
    return header + b"\x00" * (2048 - len(header))


@pytest.fixture
def mock_genai():
    """
    Patches the `genai` module used by GeminiService.

    Usage:
        mock_genai.model.generate_content_async.return_value = gemini_response("text")
    """
    with patch("app.services.gemini_service.genai") as genai:
        model = MagicMock()
        model.generate_content_async = AsyncMock()
        genai.GenerativeModel.return_value = model
        genai.model = model
        yield genai


@pytest.fixture
def gemini_response():
    """Factory fixture: gemini_response("text") → fake response whose `.text` is "text"."""

    def _factory(text):
        response = MagicMock()
        response.text = text
        return response

    return _factory


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    def json_body(self, index: int = 0) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def mock_transport():
    """
    Factory fixture: mock_transport(status, json_body) → RecordingTransport.
    """

    def _factory(status_code: int = 200, body=None) -> RecordingTransport:
        return RecordingTransport(
            lambda request: httpx.Response(status_code, json=body if body is not None else {})
        )

    return _factory


@pytest_asyncio.fixture
async def test_client():
    """
    HTTPX AsyncClient routed straight into the FastAPI app.

    Usage:
        async def test_root(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    from app.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
