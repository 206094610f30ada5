"""
Application configuration using Pydantic Settings.
"""

import os
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("APP_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FINCALC_",
        env_file=get_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    app_name: str = "Financial Calculation Engine"
    debug: bool = False
    log_level: str = "INFO"
    app_env: str = "development"

    # Rate tables (statutory rates, slabs, charges). None = packaged table.
    rate_table_path: Optional[str] = None
    default_financial_year: str = "2024-25"

    # Root-finder
    root_tolerance: float = 1e-6
    root_max_iterations: int = 100

    # Retirement planning
    longevity_buffer_percent: float = 10.0


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
