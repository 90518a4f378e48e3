"""
QR Bridge — Application Configuration
=======================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the transcoding service, the routes and the app factory.
When:  Loaded once at module import time; validated before app starts.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List

# Containers the rasterizer may be configured to emit. All are lossless for
# a two-tone image; JPEG is readable on upload but never generated.
LOSSLESS_IMAGE_FORMATS = {"PNG", "BMP", "GIF"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have working defaults
    (200x200 PNG output). Attributes are grouped by concern.
    """

    # ── QR Generation ─────────────────────────────────────────────────────
    # Size of the generated symbol matrix in pixels, quiet zone included.
    # Symbols that do not fit are emitted at their natural size instead.
    matrix_width: int = Field(default=200, ge=21, le=4000)
    matrix_height: int = Field(default=200, ge=21, le=4000)

    # Raster container for generated images (Pillow format name)
    image_format: str = Field(default="PNG")

    @field_validator("image_format")
    @classmethod
    def validate_image_format(cls, v: str) -> str:
        """Restricts output to lossless containers Pillow can write."""
        upper = v.upper()
        if upper not in LOSSLESS_IMAGE_FORMATS:
            raise ValueError(
                f"Invalid image_format '{v}'. Must be one of: {sorted(LOSSLESS_IMAGE_FORMATS)}"
            )
        return upper

    # ── Uploads ───────────────────────────────────────────────────────────
    # Default: 5MB = 5 * 1024 * 1024 = 5242880
    # Valid range: 1KB to 50MB
    max_upload_size: int = Field(default=5_242_880, ge=1024, le=52_428_800)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs (parsed by cors_origins_list)
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # MATRIX_WIDTH and matrix_width both work
        "extra": "ignore",
    }


# Singleton instance imported throughout the application
settings = Settings()
