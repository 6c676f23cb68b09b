"""Kakeibo settings, read from the environment and an optional ``.env`` file.

Environment variables always win. The ``.env`` file is the first existing one
of ``$KAKEIBO_ENV_FILE``, ``config/.env.dev`` and ``config/.env``; relative
paths are taken from the project root (the first parent directory holding a
``config/`` directory or a ``pyproject.toml``).
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE_VARIABLE = "KAKEIBO_ENV_FILE"


@lru_cache(maxsize=1)
def project_root() -> Path:
    here = Path(__file__).resolve().parent
    for candidate in (here, *here.parents):
        if (candidate / "config").is_dir() or (candidate / "pyproject.toml").is_file():
            return candidate
    return here.parents[1]


def get_config_dir() -> Path:
    return project_root() / "config"


def _resolve_env_file() -> Optional[Path]:
    candidates = [get_config_dir() / ".env.dev", get_config_dir() / ".env"]
    explicit = os.environ.get(ENV_FILE_VARIABLE)
    if explicit:
        path = Path(explicit)
        candidates.insert(0, path if path.is_absolute() else project_root() / path)
    return next((path for path in candidates if path.is_file()), None)


class Settings(BaseSettings):
    """Runtime configuration of the sync service."""

    model_config = SettingsConfigDict(
        env_file=_resolve_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "Kakeibo"
    debug: bool = False

    # Database (POSTGRES_ prefix). DATABASE_URL_OVERRIDE wins when set,
    # which is how local runs point at sqlite+aiosqlite.
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: SecretStr = SecretStr("postgres")
    postgres_db: str = "kakeibo"
    database_url_override: str = ""

    # API (API_ prefix)
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Sync (SYNC_ prefix)
    sync_max_parallel: int = Field(default=5, ge=1, le=50)
    sync_leg_timeout_seconds: float = Field(default=120.0, gt=0)
    sync_retry_delay_seconds: float = Field(default=0.0, ge=0)
    sync_timezone: str = "Asia/Tokyo"
    sync_settings_backend: Literal["database", "json"] = "database"
    sync_data_dir: str = "data"

    @field_validator("sync_timezone")
    @classmethod
    def _validate_timezone(cls, v: str) -> str:
        """Reject names that are not in the IANA database."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            msg = f"Unknown timezone: {v}"
            raise ValueError(msg) from e
        return v

    # Logging (LOG_ prefix)
    log_level: str = "INFO"

    # Computed properties
    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """Construct the database URL from components."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:"
            f"{self.postgres_password.get_secret_value()}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def sync_data_path(self) -> Path:
        """Directory holding the JSON settings files."""
        path = Path(self.sync_data_dir)
        if not path.is_absolute():
            path = project_root() / path
        return path


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()
