"""
Capuzzella configuration — all environment variables in one place.

Read from environment at runtime.
"""

from __future__ import annotations

import os
from pathlib import Path

_DEFAULT_BASE_DIR = Path(__file__).resolve().parent.parent


class Settings:
    """Application settings from environment variables."""

    # Site layout: drafts/ and public/ live under this directory
    BASE_DIR: Path = Path(os.environ.get("BASE_DIR", str(_DEFAULT_BASE_DIR))).resolve()

    # Absolute site URL used for sitemap <loc> entries
    SITE_URL: str = os.environ.get("SITE_URL", "http://localhost:8000")

    # Brotli quality for precompressed assets (0-11)
    BROTLI_QUALITY: int = int(os.environ.get("BROTLI_QUALITY", "11"))

    # Logging
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")


# Singleton instance
settings = Settings()

if not 0 <= settings.BROTLI_QUALITY <= 11:
    raise RuntimeError("BROTLI_QUALITY must be between 0 and 11")
