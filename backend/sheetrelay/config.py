"""
SheetRelay Backend — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated in the app lifespan.
"""

from pathlib import Path
from typing import List, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Only SPREADSHEET_ID and one credential source are required for a working
    deployment. Everything else has a development-friendly default.
    """

    # ── Spreadsheet ───────────────────────────────────────────────────────
    # What: The spreadsheet every endpoint reads from and writes to
    # Where: The long ID in the sheet URL (/spreadsheets/d/<ID>/edit)
    spreadsheet_id: str = Field(
        default="",
        description="Google Sheets spreadsheet ID backing all records",
    )

    # What: Sheet used when a request does not name one (generic /add and /edit)
    default_sheet: str = Field(default="Sheet1")

    # What: Column schema of the deployment (see sheetrelay.models.layout)
    # generic: A=id (ms timestamp), B=text
    # product: A=sku ... J=pictureUrl ... M=tiktokLink
    sheet_layout: Literal["generic", "product"] = Field(default="product")

    # ── Google Drive ──────────────────────────────────────────────────────
    # What: Folder that receives uploaded images
    # Empty disables POST /upload (returns a storage error)
    drive_folder_id: str = Field(default="")

    # What: Grant "anyone with the link" read access after upload
    # Why default True: Sheet consumers render the image URL directly
    drive_make_public: bool = Field(default=True)

    # ── Credentials ───────────────────────────────────────────────────────
    # Resolution order: JSON string → base64 JSON → file path
    google_credentials_json: str = Field(default="")
    google_credentials_base64: str = Field(default="")
    google_credentials_file: str = Field(default="service_account.json")

    # ── File Uploads ──────────────────────────────────────────────────────
    # Default: 10MB; valid range 1MB to 50MB
    max_file_size: int = Field(default=10_485_760, ge=1_048_576, le=52_428_800)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs, or "*" for any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    # PORT is what most hosting platforms inject; BACKEND_PORT kept for parity
    backend_port: int = Field(
        default=3001,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("port", "backend_port"),
    )

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

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # What: Optional per-IP sliding window rate limit (429 when exceeded)
    # Off by default: requests are only throttled by Google's own quota
    rate_limit_enabled: bool = Field(default=False)
    rate_limit_requests: int = Field(default=300, ge=10, le=10000)
    rate_limit_window: int = Field(default=60, ge=10, le=86400)  # seconds

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
    }

    @property
    def has_credentials(self) -> bool:
        if self.google_credentials_json or self.google_credentials_base64:
            return True
        return Path(self.google_credentials_file).is_file()

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError listing them.
        """
        errors = []
        if not self.spreadsheet_id:
            errors.append(
                "SPREADSHEET_ID is not set. "
                "Copy it from the sheet URL: /spreadsheets/d/<SPREADSHEET_ID>/edit"
            )
        if not self.has_credentials:
            errors.append(
                "No Google service account credentials found. Set GOOGLE_CREDENTIALS_JSON, "
                "GOOGLE_CREDENTIALS_BASE64, or place the key file at "
                f"'{self.google_credentials_file}'."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
