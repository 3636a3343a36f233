"""
Application Configuration

Uses pydantic-settings for environment variable loading with validation.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

BUNDLED_FORMS_DIR = Path(__file__).parent / "doctypes"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables can be set directly or via .env file.
    Frappe credentials should be provided via environment variables in production.
    """

    model_config = SettingsConfigDict(
        env_prefix="JALSAMPADA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: Literal["development", "testing", "production"] = Field(
        default="development",
        description="Runtime environment"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )

    host: str = Field(
        default="0.0.0.0",
        description="Interface the API server binds to"
    )

    port: int = Field(
        default=8001,
        description="Port the API server listens on"
    )

    # ==========================================================================
    # Frappe backend
    # ==========================================================================
    frappe_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the Frappe site (without /api)"
    )

    frappe_api_key: str = Field(
        default="",
        description="Frappe API key of the service user"
    )

    frappe_api_secret: str = Field(
        default="",
        description="Frappe API secret of the service user"
    )

    request_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for each Frappe request"
    )

    link_page_length: int = Field(
        default=200,
        description="Maximum options returned by a Link field search"
    )

    # ==========================================================================
    # Forms
    # ==========================================================================
    forms_dir: Path = Field(
        default=BUNDLED_FORMS_DIR,
        description="Directory holding *.form.json doctype layouts"
    )

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @computed_field
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @computed_field
    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
