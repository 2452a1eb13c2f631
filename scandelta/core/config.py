"""Configuration loaded from environment variables and an optional .env file."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class GeneralSettings(BaseModel):
    """Project-wide settings echoed into every report."""

    workdir: Path = Field(
        default=Path("scandelta-data"),
        description="Root directory; reports are stored under <workdir>/reports.",
    )
    name: str = Field(default="unnamed", description="Project name shown in the report header.")
    repo: str | None = Field(default=None, description="Repository URL of the scanned source.")
    revision: str | None = Field(default=None, description="Revision the scanners ran on.")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("GENERAL name must be non-empty")
        return v.strip()


class ScannerProcessSettings(BaseModel):
    """Per-scanner processing options (keyed by scanner name)."""

    sort_field: str | None = Field(
        default=None,
        description="Message field used to sort rendered messages; 'severity' sorts by rank.",
    )
    ignore_fields: list[str] = Field(
        default_factory=list,
        description="Fields excluded when matching findings across scans (e.g. timestamps).",
    )

    @field_validator("ignore_fields", mode="before")
    @classmethod
    def validate_ignore_fields(cls, v: object) -> object:
        # A single field name is accepted for convenience.
        if isinstance(v, str):
            return [v]
        return v


class Settings(BaseSettings):
    """Validated settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    LOG_LEVEL: LogLevel = "INFO"

    GENERAL: GeneralSettings = Field(default_factory=GeneralSettings)
    PROCESS: dict[str, ScannerProcessSettings] = Field(default_factory=dict)

    # Report retention: delete persisted reports older than RETENTION_DAYS (run via cron or CLI)
    RETENTION_ENABLED: bool = False
    RETENTION_DAYS: int = 90

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("RETENTION_DAYS")
    @classmethod
    def validate_retention_days(cls, v: int) -> int:
        if v < 1 or v > 3650:
            raise ValueError(
                "RETENTION_DAYS must be between 1 and 3650 (1 day to 10 years)"
            )
        return v

    def sort_fields(self) -> dict[str, str]:
        """Scanner name -> sort field, for scanners that configure one."""
        return {
            name: process.sort_field
            for name, process in self.PROCESS.items()
            if process.sort_field
        }

    def ignore_fields(self) -> dict[str, list[str]]:
        """Scanner name -> fields ignored when diffing."""
        return {
            name: list(process.ignore_fields)
            for name, process in self.PROCESS.items()
            if process.ignore_fields
        }


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
