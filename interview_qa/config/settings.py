"""
Configuration settings for the interview Q&A corpus builder.

This module uses Pydantic Settings to manage configuration from environment
variables and .env files with validation and type safety.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class IngestionSettings(BaseSettings):
    """Document discovery and loading configuration."""

    model_config = SettingsConfigDict(env_prefix="INGEST_")

    pattern: str = Field(
        default="*",
        description="Glob pattern for files inside the input directory",
    )
    recursive: bool = Field(
        default=True,
        description="Search subdirectories",
    )
    encodings: list[str] = Field(
        default_factory=lambda: ["utf-8", "latin-1", "cp1252"],
        description="Encodings tried in order when decoding documents",
    )
    max_file_size_mb: int = Field(
        default=10,
        ge=1,
        le=500,
        description="Maximum document size in MB",
    )
    max_workers: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Documents loaded and extracted concurrently",
    )

    @field_validator("encodings")
    @classmethod
    def validate_encodings(cls, v: list[str]) -> list[str]:
        """Require at least one encoding."""
        if not v:
            raise ValueError("At least one encoding must be configured")
        return v


class ExtractionSettings(BaseSettings):
    """Record extraction configuration."""

    model_config = SettingsConfigDict(env_prefix="EXTRACT_")

    numbered_headings: bool = Field(
        default=True,
        description="Treat 'N. Title' headings as questions even without '?'",
    )
    min_heading_level: int = Field(
        default=1,
        ge=1,
        le=6,
        description="Shallowest heading level considered for questions",
    )
    max_heading_level: int = Field(
        default=6,
        ge=1,
        le=6,
        description="Deepest heading level considered for questions",
    )

    @model_validator(mode="after")
    def validate_level_range(self) -> "ExtractionSettings":
        """Ensure the heading level range is not empty."""
        if self.min_heading_level > self.max_heading_level:
            raise ValueError("min_heading_level must not exceed max_heading_level")
        return self


class ExportSettings(BaseSettings):
    """Corpus export configuration."""

    model_config = SettingsConfigDict(env_prefix="EXPORT_")

    format: Literal["json", "jsonl"] = Field(
        default="json",
        description="Array-of-objects JSON or line-delimited JSON",
    )
    indent: int | None = Field(
        default=2,
        ge=0,
        le=8,
        description="Indentation for array JSON output (None for compact)",
    )
    include_html: bool = Field(
        default=False,
        description="Add the answer rendered as HTML to each exported record",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Log level",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log format",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(
        default="interview-qa",
        description="Application name",
    )

    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application settings instance.

    Note:
        Settings are cached after first load. Call `get_settings.cache_clear()`
        to reload settings from environment.
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Reload settings from environment.

    Returns:
        Settings: Fresh application settings instance.
    """
    get_settings.cache_clear()
    return get_settings()
