"""Centralized settings management for the city guide content service."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings powered by pydantic-settings.

    Loads configuration from environment variables and a .env file located
    at the project root.
    """

    # -------------------------------------------------------------------------
    # ENVIRONMENT
    # -------------------------------------------------------------------------
    ENV: str = "development"
    DEBUG: bool = False

    # -------------------------------------------------------------------------
    # LOGGING
    # -------------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # -------------------------------------------------------------------------
    # TABULAR DATA SOURCE
    # -------------------------------------------------------------------------
    # One spreadsheet with a tab per content kind
    MASTER_SHEET_ID: str = ""
    SHEETS_BASE_URL: str = "https://docs.google.com/spreadsheets/d"
    SHEETS_REQUEST_TIMEOUT: float = Field(default=15.0, gt=0)
    REFRESH_ON_STARTUP: bool = True
    # Refresh results kept for /health stats
    REFRESH_HISTORY_LIMIT: int = Field(default=500, gt=0)

    # -------------------------------------------------------------------------
    # NEWSLETTER PROVIDER
    # -------------------------------------------------------------------------
    BEEHIIV_API_KEY: SecretStr | None = None
    BEEHIIV_PUBLICATION_ID: str | None = None
    BEEHIIV_BASE_URL: str = "https://api.beehiiv.com/v2"

    # -------------------------------------------------------------------------
    # FORM RELAYS
    # -------------------------------------------------------------------------
    EVENT_SUBMISSION_ENDPOINT: str | None = None
    PARTNER_INQUIRY_ENDPOINT: str | None = None
    RELAY_REQUEST_TIMEOUT: float = Field(default=10.0, gt=0)

    # -------------------------------------------------------------------------
    # PATHS
    # -------------------------------------------------------------------------
    # BASE_DIR points to the cityguide package
    BASE_DIR: Path = Path(__file__).resolve().parents[1]

    CONTENT_SOURCES_PATH: Path = BASE_DIR / "configs" / "content_sources.yaml"
    FALLBACK_EVENTS_PATH: Path = BASE_DIR / "assets" / "fallback_events.json"
    FALLBACK_ARTICLES_PATH: Path = BASE_DIR / "assets" / "fallback_articles.json"

    # -------------------------------------------------------------------------
    # CONFIGURATION
    # -------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        # Allow extra fields in .env but ignore them in the model
        extra="ignore",
    )

    @property
    def newsletter_configured(self) -> bool:
        """Whether both newsletter credentials are present."""
        return bool(self.BEEHIIV_API_KEY and self.BEEHIIV_PUBLICATION_ID)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns
    -------
    Settings
        The singleton settings instance.
    """
    return Settings()
