"""Environment-based configuration for ImageScaler."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from IMAGESCALER_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="IMAGESCALER_",
        case_sensitive=False,
    )

    # Server
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8080
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Concurrency
    max_concurrent: int = Field(default=2, ge=1)
    queue_timeout: float = Field(default=5.0, gt=0)
    transform_timeout: float = Field(default=30.0, gt=0)

    # Input limits
    max_file_size: int = Field(default=20_971_520, ge=1)
    max_image_pixels: int = Field(default=16_777_216, ge=1)

    # Resizing
    resample: Literal["nearest", "bilinear", "bicubic", "lanczos"] = "bicubic"


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
