"""
Application configuration loaded from environment variables.

All configuration is validated at startup to fail fast on misconfiguration.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with validation.

    All settings are loaded from environment variables with the same name.
    Use .env file for local development. List values are given as JSON,
    e.g. KNOWN_INTERNAL_IDS='["SHP-0001", "SHP-0002"]'.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Requirement tables
    requirements_table_path: Path | None = Field(
        default=None,
        description="JSON file with permit rules and chapter checklists (bundled table if unset)"
    )

    # Classification
    confidence_floor: int = Field(
        default=20,
        ge=0,
        le=100,
        description="Confidence below which a document is classified as unknown"
    )
    full_confidence_score: int = Field(
        default=50,
        gt=0,
        description="Raw keyword score that maps to 100% confidence"
    )
    filename_bonus: int = Field(
        default=20,
        ge=0,
        description="Score bonus when the filename names the document kind"
    )

    # Source classification
    internal_markers: list[str] = Field(
        default_factory=lambda: ["orion", "orión"],
        description="Tokens that mark a document as produced by the internal pipeline"
    )
    known_internal_ids: list[str] = Field(
        default_factory=list,
        description="Internal shipment identifiers checked on every intake"
    )

    # Server
    cors_origins: list[str] = Field(
        default_factory=list,
        description="Allowed CORS origins outside debug mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with detailed error messages"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once at startup and cached for subsequent calls.
    """
    return Settings()
