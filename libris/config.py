"""Configuration management for Libris using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ExistingBookPolicy = Literal["update", "skip"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database settings
    database_url: str = Field(
        default="postgresql+asyncpg://postgres@localhost/libris_local",
        description="Database URL with async driver (asyncpg or aiosqlite)",
    )
    database_echo: bool = Field(
        default=False,
        description="Echo SQL queries to console",
    )

    # Import directory settings
    imports_dir: Path = Field(
        default=Path("imports"),
        description="Root directory holding the incoming/processed/failed folders",
    )

    # Import behaviour
    existing_book_policy: ExistingBookPolicy = Field(
        default="update",
        description=(
            "What to do when an imported record matches an existing book: "
            "'update' overwrites all fields, 'skip' leaves the row untouched"
        ),
    )
    created_by: str = Field(
        default="import",
        description="Provenance tag stored on books created by the importer",
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    environment: str = Field(
        default="development",
        description="Environment (development or production)",
    )

    # CORS settings
    cors_allowed_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins for API requests",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a standard logging level name."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed_levels:
            raise ValueError(
                f"Invalid log_level: {v}. Allowed values: {', '.join(sorted(allowed_levels))}"
            )
        return v.upper()

    @property
    def incoming_dir(self) -> Path:
        """Directory scanned for pending ONIX files."""
        return self.imports_dir / "incoming"

    @property
    def processed_dir(self) -> Path:
        """Destination for files that imported successfully."""
        return self.imports_dir / "processed"

    @property
    def failed_dir(self) -> Path:
        """Destination for files that failed to import."""
        return self.imports_dir / "failed"

    def ensure_import_directories(self) -> None:
        """Create the incoming, processed and failed directories if missing."""
        for directory in (self.incoming_dir, self.processed_dir, self.failed_dir):
            directory.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
