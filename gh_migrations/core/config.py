"""Configuration management for the migration tool."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")
    log_file: Optional[Path] = Field(default=None)

    # HTTP Configuration
    request_timeout: float = Field(default=30.0, gt=0)

    # Polling Configuration
    poll_interval_seconds: float = Field(default=60.0, ge=0)
    max_poll_attempts: int = Field(default=180, ge=1)

    # Launch Configuration
    launch_jitter_seconds: float = Field(default=5.0, ge=0)

    # Storage Configuration
    archive_chunk_size: int = Field(default=1024 * 1024, ge=1)


class BlobStoreConfig(BaseModel):
    """Connection parameters for the remote archive container."""
    connection_string: str = Field(..., min_length=1)
    container: str = Field(..., min_length=1)


class RunConfig(BaseModel):
    """Parameters for a single migration run."""
    lock_repositories: bool = False
    output_dir: Path = Path("archives")
    remote_store: Optional[BlobStoreConfig] = None


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
