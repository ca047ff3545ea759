# /annotation_backend/core/config.py

"""
Centralized, strongly-typed application configuration.

Values are read from the environment first and from a `.env` file second.
Unknown variables are ignored. Workflow policy (onboarding pass threshold,
question sample size, batch limits) lives here so the engine never hard-codes
it.

Usage:
    from annotation_backend.core.config import settings
    threshold = settings.ONBOARDING_PASS_THRESHOLD
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables or `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Storage ---
    DATABASE_URL: str = Field("sqlite:///./annotation.db", description="SQLAlchemy database URL.")
    VOICE_UPLOAD_DIR: str = Field("voice_uploads", description="Directory where voice recordings are written.")
    MAX_VOICE_UPLOAD_BYTES: int = Field(10 * 1024 * 1024, gt=0, description="Largest accepted voice upload.")

    # --- Auth ---
    SECRET_KEY: str = Field("change-me-in-production", description="HMAC key used to sign access tokens.")
    ALGORITHM: str = Field("HS256", description="JWT signing algorithm.")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 24, gt=0, description="Access token lifetime in minutes.")

    # --- HTTP ---
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    # --- Logging ---
    LOG_LEVEL: str = Field("INFO", description="Root log level.")

    # --- Workflow policy ---
    ONBOARDING_PASS_THRESHOLD: float = Field(0.7, ge=0.0, le=1.0, description="Fraction of correct answers needed to pass.")
    ONBOARDING_QUESTION_COUNT: int = Field(10, gt=0, description="Questions sampled into a new onboarding test.")
    PROFICIENCY_ADVANCED_THRESHOLD: float = Field(0.9, ge=0.0, le=1.0)
    MAX_BATCH_SIZE: int = Field(100, gt=0, description="Largest accepted MT batch-assessment request.")

    # --- MT scoring collaborator ---
    GOOGLE_API_KEY: Optional[str] = Field(None, description="API key for the Gemini scoring model.")
    GEMINI_MODEL: str = Field("gemini-2.5-flash")


settings = Settings()
