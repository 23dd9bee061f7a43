"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App Info
    app_name: str = "Stat Taker API"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8600
    workers: int = 1

    # Database
    data_save_folder: str = "./data"
    db_file: str = "stattaker.db"

    @property
    def database_url(self) -> str:
        """SQLite database URL."""
        db_path = Path(self.data_save_folder) / self.db_file
        return f"sqlite+aiosqlite:///{db_path}"

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Interview sessions
    session_idle_timeout_minutes: int = Field(default=30, ge=1)
    session_reaper_interval_seconds: int = Field(default=60, ge=1)
    enable_session_reaper: bool = Field(
        default=True,
        alias="ENABLE_SESSION_REAPER",
    )

    # Workflow definitions seeded at startup (YAML)
    workflow_seed_path: str | None = Field(
        default=None,
        alias="WORKFLOW_SEED_PATH",
        description="Optional YAML file with workflow definitions to load at startup",
    )

    # Coordinate space of reference images
    coordinate_min: float = 0.0
    coordinate_max: float = 1.0

    # Event type of lineup (substitution-in) events
    lineup_event_type_id: str = "00000000-0000-0000-0000-000000000002"

    @field_validator("workflow_seed_path", mode="before")
    @classmethod
    def blank_seed_path_is_none(cls, v: str | None) -> str | None:
        """Treat an empty seed path as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
