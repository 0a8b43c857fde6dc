from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict


# Load .env early for local development
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True)

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./bizboost.db")
    sqlite_busy_timeout_seconds: float = float(os.getenv("SQLITE_BUSY_TIMEOUT_SECONDS", "30"))

    # Single local identity (no auth)
    local_user_id: str = os.getenv("LOCAL_USER_ID", "demo-user-123")
    local_user_name: str = os.getenv("LOCAL_USER_NAME", "FBLA User")
    local_user_email: str = os.getenv("LOCAL_USER_EMAIL", "fbla@example.com")

    # Review CAPTCHA
    captcha_max_sessions: int = int(os.getenv("CAPTCHA_MAX_SESSIONS", "1024"))
    captcha_ttl_seconds: int = int(os.getenv("CAPTCHA_TTL_SECONDS", str(60 * 30)))  # 0 disables expiry

    # Demo dataset
    seed_sample_data: bool = _env_flag("SEED_SAMPLE_DATA", "true")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_dir: str = os.getenv("LOG_DIR", "./logs")  # empty: console only
    # Per-logger overrides, e.g. "bizboost.services.captcha=DEBUG,sqlalchemy.engine=INFO"
    log_levels: str = os.getenv("LOG_LEVELS", "")


settings = Settings()
