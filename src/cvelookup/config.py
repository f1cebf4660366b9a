"""Configuration management for cvelookup using Pydantic Settings.

Configuration is loaded from environment variables and/or .env files.
Environment variables take precedence over .env file values.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

RECENT_SEARCHES_FILE = "recent-searches.json"


class CatalogSettings(BaseSettings):
    """Vulnerability catalog settings."""

    model_config = SettingsConfigDict(env_prefix="CATALOG_")

    dataset_path: Path | None = Field(
        default=None,
        description="Path to a JSON dataset. None uses the bundled dataset.",
    )
    search_delay: float = Field(
        default=1.5,
        ge=0,
        description="Simulated latency of an image search, in seconds",
    )
    detail_delay: float = Field(
        default=0.8,
        ge=0,
        description="Simulated latency of a single CVE lookup, in seconds",
    )

    @field_validator("dataset_path", mode="before")
    @classmethod
    def ensure_path(cls, v: str | Path | None) -> Path | None:
        """Ensure dataset_path is a Path object."""
        if v in (None, ""):
            return None
        return Path(v) if isinstance(v, str) else v


class RecentSearchSettings(BaseSettings):
    """Recent search history settings."""

    model_config = SettingsConfigDict(env_prefix="RECENT_SEARCHES_")

    enabled: bool = Field(
        default=True,
        description="Whether recent searches are persisted at all",
    )
    storage_path: Path | None = Field(
        default=None,
        description="File backing the recent search storage; defaults to data_dir",
    )
    key: str = Field(
        default="recent-searches",
        min_length=1,
        description="Storage key holding the recent search list",
    )
    max_entries: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum number of recent searches kept",
    )

    @field_validator("storage_path", mode="before")
    @classmethod
    def ensure_path(cls, v: str | Path | None) -> Path | None:
        """Ensure storage_path is a Path object."""
        if v in (None, ""):
            return None
        return Path(v) if isinstance(v, str) else v


class Settings(BaseSettings):
    """Main application settings.

    All settings can be configured via environment variables.
    Nested settings use double underscores, e.g., CATALOG__SEARCH_DELAY.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    data_dir: Path = Field(
        default=Path("./data"),
        description="Directory for locally persisted data",
    )

    # Nested settings
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    recent_searches: RecentSearchSettings = Field(default_factory=RecentSearchSettings)

    @field_validator("data_dir", mode="before")
    @classmethod
    def ensure_path(cls, v: str | Path) -> Path:
        """Ensure data_dir is a Path object."""
        return Path(v) if isinstance(v, str) else v

    @model_validator(mode="after")
    def default_storage_path(self) -> "Settings":
        """Place the recent search file under data_dir unless set explicitly."""
        if self.recent_searches.storage_path is None:
            self.recent_searches.storage_path = self.data_dir / RECENT_SEARCHES_FILE
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Application settings instance, cached for reuse.
    """
    return Settings()
