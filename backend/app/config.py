"""
VoiceNote Backend — Application Configuration
==============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.

Missing credentials are NOT a startup failure. The server starts, logs a
warning, and each endpoint that needs a credential reports a
configuration error when it is called.
"""

import tempfile
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes are grouped by concern for readability.
    """

    # ── Google Gemini ─────────────────────────────────────────────────────
    # What: Single credential for both speech-to-text and text generation
    # How to obtain: https://aistudio.google.com/app/apikey
    gemini_api_key: str = Field(
        default="",
        description="Google Gemini API key used for transcription and text polishing",
    )

    # What: Model used for transcription, polishing and title generation
    # Options: gemini-1.5-flash (faster, cheaper), gemini-1.5-pro (higher quality)
    gemini_model: str = Field(default="gemini-1.5-flash")

    # ── Notion ────────────────────────────────────────────────────────────
    # What: OAuth client credentials of the public Notion integration.
    # Only the OAuth callback needs these; page creation uses the
    # caller-supplied key from the request body.
    notion_client_id: str = Field(default="")
    notion_client_secret: str = Field(default="")

    # What: Redirect URI registered with the Notion integration.
    # Empty → derived from the local port (see redirect_uri below)
    notion_redirect_uri: str = Field(default="")

    notion_api_base: str = Field(default="https://api.notion.com/v1")
    notion_version: str = Field(default="2022-06-28")

    # What: Timeout (seconds) for Notion HTTP calls
    http_timeout: float = Field(default=30.0, gt=0, le=300)

    # ── Uploads ───────────────────────────────────────────────────────────
    # What: Directory for transient audio files (deleted after each request)
    upload_dir: str = Field(default_factory=tempfile.gettempdir)

    # What: Maximum accepted audio size in bytes
    # Default: 10 MiB = 10 * 1024 * 1024 = 10485760
    max_upload_size: int = Field(default=10_485_760, ge=1_048_576, le=52_428_800)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs (parsed by the property below)
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # GEMINI_API_KEY and gemini_api_key both work
        "extra": "ignore",
    }

    # ── Derived Values ────────────────────────────────────────────────────

    @property
    def redirect_uri(self) -> str:
        """OAuth redirect URI: explicit setting, else the local callback URL."""
        if self.notion_redirect_uri:
            return self.notion_redirect_uri
        return f"http://localhost:{self.port}/api/notion/callback"

    @property
    def is_gemini_configured(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def is_notion_oauth_configured(self) -> bool:
        return bool(self.notion_client_id and self.notion_client_secret)

    def missing_credentials(self) -> List[str]:
        """
        What:  Lists the environment variables a fully working server needs but lacks.
        When:  Called during app startup (lifespan) to log warnings.
        """
        missing = []
        if not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        if not self.notion_client_id:
            missing.append("NOTION_CLIENT_ID")
        if not self.notion_client_secret:
            missing.append("NOTION_CLIENT_SECRET")
        return missing


# Singleton instance — imported throughout the application
settings = Settings()
