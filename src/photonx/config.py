"""Environment-based configuration for PhotonX."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from photonx.imaging.filters import FilterKind


class Settings(BaseSettings):
    """Application settings loaded from PHOTONX_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PHOTONX_",
        case_sensitive=False,
    )

    # Server
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8083
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Authentication (None = disabled)
    api_key: str | None = None

    # Concurrency
    max_concurrent: int = Field(default=2, ge=1)

    # Input limits
    max_image_pixels: int = Field(default=16_777_216, ge=1)
    max_file_size: int = Field(default=52_428_800, ge=1)
    max_html_size: int = Field(default=5_242_880, ge=1)

    # Transcoding defaults
    default_filter: FilterKind = FilterKind.LANCZOS3
    default_jpeg_quality: int = Field(default=80, ge=0, le=100)

    # Fit-to-limits defaults
    fit_max_width: int = Field(default=2000, ge=1)
    fit_max_height: int = Field(default=2000, ge=1)
    fit_max_bytes: int = Field(default=4_718_592, ge=1)
    fit_jpeg_quality: int = Field(default=80, ge=0, le=100)


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
