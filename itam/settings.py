"""
itam.settings
=============

Configuration settings for the ITAM rules service.

This module provides centralized configuration options that can be used
across the application.  Defaults can be overridden via environment
variables (``ITAM_`` prefix) or a ``.env`` file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings

# ---------------------------------------------------------------------------
# Base directories
# ---------------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent

# Database settings
# ---------------------------------------------------------------------------
DB_FILE = os.environ.get("ITAM_DB_FILE", str(BASE_DIR / "itam.db"))
DB_ECHO = os.environ.get("ITAM_DB_ECHO", "False").lower() == "true"


# ---------------------------------------------------------------------------
# Pydantic settings model
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Pydantic model for application settings, loaded from environment variables."""

    db_url: str = Field(f"sqlite:///{DB_FILE}", description="SQLAlchemy database URL")
    db_echo: bool = Field(DB_ECHO, description="Echo SQL statements")

    # Rule engine tuning
    expiring_window_days: int = Field(30, ge=0, description="Days before expiry a license counts as expiring")
    at_risk_threshold: float = Field(0.9, gt=0, le=1, description="Seat utilization ratio flagged as at-risk")
    underutilized_threshold: float = Field(0.3, ge=0, le=1, description="Utilization below which an active license is underused")
    strict_required_fields: bool = Field(
        False, description="Reject asset creation when class-required fields are missing"
    )

    # API settings
    api_host: str = Field("127.0.0.1", description="Bind address for uvicorn")
    api_port: int = Field(8000, description="Bind port for uvicorn")
    api_debug: bool = Field(False, description="Verbose API logging")
    cors_origins: List[str] = Field(
        default=[
            "http://localhost:5173",    # Vite dev server default port
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        description="Origins allowed by the CORS middleware",
    )
    page_size_max: int = Field(1000, ge=1, description="Upper bound for list endpoint page size")

    log_level: str = Field("INFO", description="Root logging level")
    image_dir: Path = Field(Path("images"), description="Where chart PNGs are written")

    class Config:
        """Configuration for the settings model."""
        env_prefix = "ITAM_"
        env_file = ".env"  # load from .env file if present
        case_sensitive = False


# Initialize settings
settings = Settings()
