"""Configuration handling for the stock shorts feed."""

from __future__ import annotations

from functools import lru_cache

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration sourced from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    # Google Sheets content source
    sheets_spreadsheet_id: str | None = Field(
        default=None, validation_alias="GOOGLE_SHEETS_SPREADSHEET_ID"
    )
    sheets_api_key: str | None = Field(default=None, validation_alias="GOOGLE_SHEETS_API_KEY")
    sheets_access_token: str | None = Field(
        default=None, validation_alias="GOOGLE_SHEETS_ACCESS_TOKEN"
    )
    sheets_range: str = Field(default="Sheet1!A2:O1000", validation_alias="GOOGLE_SHEETS_RANGE")
    sheets_base_url: AnyHttpUrl = Field(
        default="https://sheets.googleapis.com", validation_alias="GOOGLE_SHEETS_BASE_URL"
    )
    sheets_timeout_seconds: float = Field(
        default=20.0,
        validation_alias="GOOGLE_SHEETS_TIMEOUT_SECONDS",
        ge=1.0,
        le=120.0,
        description="Timeout in seconds for spreadsheet requests.",
    )
    sheets_max_retries: int = Field(
        default=3,
        validation_alias="GOOGLE_SHEETS_MAX_RETRIES",
        ge=0,
        le=8,
        description="Number of retries for spreadsheet requests before failing.",
    )
    sheets_backoff_base_seconds: float = Field(
        default=1.0,
        validation_alias="GOOGLE_SHEETS_BACKOFF_BASE_SECONDS",
        ge=0.1,
        le=60.0,
    )
    sheets_backoff_cap_seconds: float = Field(
        default=30.0,
        validation_alias="GOOGLE_SHEETS_BACKOFF_CAP_SECONDS",
        ge=0.5,
        le=300.0,
    )

    # Sync behaviour
    sync_interval_minutes: int = Field(
        default=2, validation_alias="SYNC_INTERVAL_MINUTES", ge=1, le=720
    )
    sync_stale_wait_seconds: float = Field(
        default=5.0,
        validation_alias="SYNC_STALE_WAIT_SECONDS",
        ge=0.0,
        le=60.0,
        description="How long a read waits on a staleness-triggered sync before serving stale data.",
    )
    seed_sample_articles: bool = Field(default=True, validation_alias="SEED_SAMPLE_ARTICLES")
    sqlite_path: str = Field(default="data/stock_shorts.db", validation_alias="SQLITE_PATH")

    # Translation
    openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
    openai_base_url: AnyHttpUrl = Field(
        default="https://api.openai.com/v1", validation_alias="OPENAI_BASE_URL"
    )
    openai_model: str = Field(default="gpt-4o", validation_alias="OPENAI_MODEL")
    translation_timeout_seconds: float = Field(
        default=15.0,
        validation_alias="TRANSLATION_TIMEOUT_SECONDS",
        ge=1.0,
        le=120.0,
    )
    translation_max_retries: int = Field(
        default=2, validation_alias="TRANSLATION_MAX_RETRIES", ge=0, le=5
    )
    translation_retry_delay_seconds: float = Field(
        default=2.0,
        validation_alias="TRANSLATION_RETRY_DELAY_SECONDS",
        ge=0.0,
        le=30.0,
    )

    @property
    def sheets_enabled(self) -> bool:
        return bool(self.sheets_spreadsheet_id)


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
