"""Filter configuration settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Find project root (where .env file lives)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent  # core -> scanquery -> root
_ENV_FILE = _PROJECT_ROOT / ".env"


class FilterSettings(BaseSettings):
    """Configuration values for filter compilation and paging."""

    max_rows_per_page: int = Field(
        default=0,
        ge=0,
        description="System-wide cap on rows per page, 0 for no cap",
    )
    default_rows_per_page: int = Field(
        default=10,
        description="Page size used when a filter asks for rows=-2",
    )
    critical_severity: bool = Field(
        default=False,
        description="Whether the critical severity class is enabled",
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> FilterSettings:
    """Get cached filter settings."""
    return FilterSettings()
