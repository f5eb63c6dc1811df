# app/core/config.py
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Global application configuration.

    Values are loaded from environment variables (or a local `.env` file)
    at runtime.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "Workspace Meetings"
    APP_ENV: str = Field("local", description="Environment name: local/test/dev/stage/prod")

    LOG_LEVEL: str = Field(
        "INFO",
        description="Root log level applied by configure_logging().",
    )

    DB_URL: str = Field(
        "sqlite+aiosqlite:///./meetings.db",
        description="SQLAlchemy-compatible async database URL",
    )

    INTERNAL_API_KEY: str | None = Field(
        default=None,
        description="API key required for hitting /internal provisioning endpoints",
    )

    DEFAULT_PAGE_SIZE: int = Field(
        default=10,
        ge=1,
        description="Page size used by event listing when none (or garbage) is supplied.",
    )
    MAX_PAGE_SIZE: int = Field(
        default=100,
        ge=1,
        description="Upper bound for a requested page size; larger values are clamped.",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Cached accessor for application settings.

    Settings are read and validated once per process.
    """
    return Settings()
