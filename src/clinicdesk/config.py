# Settings: environment-driven configuration for the admin dashboard.
# Created: 2026-10-18

from __future__ import annotations

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

PROJECT_ROOT_DIR = Path(__file__).resolve().parent.parent.parent
ENV_FILE_PATH = PROJECT_ROOT_DIR / ".env"


class Settings(BaseSettings):
    """Runtime settings, read from ``CLINICDESK_*`` env vars and ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="CLINICDESK_",
        env_file=str(ENV_FILE_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Platform backend
    api_base_url: str = "http://localhost:3001/api"
    socket_url: str = "http://localhost:3001"
    request_timeout_seconds: float = 15.0

    # Token lifecycle
    token_max_age_seconds: int = 24 * 60 * 60
    refresh_safety_window_seconds: int = 60
    refresh_timeout_seconds: float = 10.0

    # Browser session
    session_secret: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    session_ttl_hours: int = 24
    session_prune_interval_seconds: float = 300.0
    cookie_secure: bool = False

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    @field_validator("api_base_url", "socket_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def load(cls) -> Settings:
        """Build a fresh Settings instance from the current environment."""
        settings = cls()
        logger.debug("Loaded settings (api_base_url=%s)", settings.api_base_url)
        return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, loaded once."""
    return Settings.load()
