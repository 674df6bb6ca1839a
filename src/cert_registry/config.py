"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables prefixed with CERT_REGISTRY_
  - Fall back to a .env file
  - Validate types and constraints at startup

env_nested_delimiter="__" maps CERT_REGISTRY_DATABASE__PATH to database.path.
Each front-end has its own default database file; database.path overrides it
for both.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the .env file relative to the project root (two levels above this file),
# so settings load correctly regardless of the working directory at runtime.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"

SHELL_DATABASE_FILE = "platform_certificates.db"
CLI_DATABASE_FILE = "certificates.db"


class DatabaseSettings(BaseModel):
    """Location of the SQLite database file."""

    path: Path | None = Field(
        default=None,
        description="Database file (overrides the front-end's default file name)",
    )

    @field_validator("path", mode="before")
    @classmethod
    def reject_empty_path(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            raise ValueError("Database path must not be empty")
        return value

    def resolve(self, default_file: str) -> Path:
        """Configured path, or `default_file` in the working directory."""
        return self.path if self.path is not None else Path(default_file)


class AppSettings(BaseSettings):
    """
    Root application settings.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="CERT_REGISTRY_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    database: DatabaseSettings = Field(default_factory=lambda: DatabaseSettings())
    log_level: str = Field(default="WARNING")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept standard logging level names in any case."""
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level
