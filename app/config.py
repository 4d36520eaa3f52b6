"""
Gahoi Sathi — Application Configuration

Loads all configuration from environment variables (and an optional .env file)
using Pydantic Settings.  A cached ``get_settings()`` helper is provided so that
FastAPI dependency-injection (and any other call-site) always receives the same
validated instance without re-parsing the environment on every request.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the Gahoi Sathi platform."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "EK Gahoi"

    # ------------------------------------------------------------------ #
    # Database – PostgreSQL (asyncpg)
    # ------------------------------------------------------------------ #
    DATABASE_URL: str

    # ------------------------------------------------------------------ #
    # Redis – optional pub/sub relay for realtime hints
    # ------------------------------------------------------------------ #
    REDIS_URL: str = ""
    REALTIME_CHANNEL: str = "sathi:realtime"

    # ------------------------------------------------------------------ #
    # Runtime environment
    # ------------------------------------------------------------------ #
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    REQUEST_TIMEOUT_SECONDS: float = 70.0

    # ------------------------------------------------------------------ #
    # CORS
    # ------------------------------------------------------------------ #
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # ------------------------------------------------------------------ #
    # File storage
    # ------------------------------------------------------------------ #
    STORAGE_TYPE: str = "local"  # local / blob
    UPLOAD_DIR: str = "uploads/photos"
    PUBLIC_URL_BASE: str = "http://localhost:5050"
    GCP_PROJECT_ID: str = ""
    GCS_BUCKET_NAME: str = ""

    # ------------------------------------------------------------------ #
    # Browser push (VAPID)
    # ------------------------------------------------------------------ #
    VAPID_PUBLIC_KEY: str = ""
    VAPID_PRIVATE_KEY: str = ""
    VAPID_EMAIL: str = "mailto:admin@gahoisathi.com"

    # ------------------------------------------------------------------ #
    # Domain limits
    # ------------------------------------------------------------------ #
    SESSION_TTL_DAYS: int = 7
    BCRYPT_ROUNDS: int = 12
    MESSAGE_MAX_LENGTH: int = 5000
    MAX_PHOTOS: int = 3
    PROFILE_VIEW_DEDUP_HOURS: int = 1

    # ------------------------------------------------------------------ #
    # Derived helpers
    # ------------------------------------------------------------------ #
    @property
    def allowed_origins_list(self) -> list[str]:
        """Return ALLOWED_ORIGINS as a list split on commas."""
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def push_enabled(self) -> bool:
        return bool(self.VAPID_PUBLIC_KEY and self.VAPID_PRIVATE_KEY)

    @field_validator("STORAGE_TYPE")
    @classmethod
    def _storage_type_must_be_known(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("local", "blob"):
            raise ValueError(f"STORAGE_TYPE must be 'local' or 'blob', got {v!r}")
        return v

    @field_validator(
        "SESSION_TTL_DAYS",
        "MESSAGE_MAX_LENGTH",
        "MAX_PHOTOS",
        "PROFILE_VIEW_DEDUP_HOURS",
    )
    @classmethod
    def _limit_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Limit must be positive, got {v}")
        return v

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def _rounds_in_bcrypt_range(cls, v: int) -> int:
        if not 4 <= v <= 31:
            raise ValueError(f"BCRYPT_ROUNDS must be between 4 and 31, got {v}")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached, validated ``Settings`` instance.

    Using ``@lru_cache`` guarantees the .env file is read and validated
    exactly once per process lifetime.  Import this function anywhere you
    need access to configuration::

        from app.config import get_settings
        settings = get_settings()
    """
    return Settings()  # type: ignore[call-arg]
