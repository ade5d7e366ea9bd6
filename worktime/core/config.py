from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment-driven configuration shared by the API and the client core."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "WorkTime"
    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    DB_URL: str = Field(default="sqlite:///./worktime.db", validation_alias="DATABASE_URL")

    JWT_SECRET: str = "your-secret-key-change-in-production"
    JWT_EXPIRES_DAYS: int = 7
    # Comma separated list of CORS origins.
    ALLOWED_ORIGINS: str = "http://localhost:5173"

    HOST: str = "0.0.0.0"
    PORT: int = 5000

    DEFAULT_PROJECT_COLOR: str = "#00E599"
    SESSIONS_PAGE_LIMIT: int = 50
    SESSIONS_PAGE_MAX: int = 100
    SESSION_DURATION_TOLERANCE_SECONDS: int = 5

    # ---- client core
    API_BASE_URL: str = "http://localhost:5000"
    CLIENT_TIMEOUT_SECONDS: float = 10.0
    CLIENT_STATE_PATH: Path = Field(default_factory=lambda: Path.home() / ".worktime" / "state.json")
    TIMER_INTERVAL_SECONDS: float = 1.0

    @property
    def allowed_origins(self) -> list[str]:
        return [item.strip() for item in self.ALLOWED_ORIGINS.split(",") if item.strip()]


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


settings = get_settings()
