from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Iterable

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven configuration shared by the backend and the client."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "StaffDesk"
    DATA_DIR: Path = Field(default_factory=lambda: Path.cwd() / "data")

    # ---- backend
    DB_URL: str = Field(default="sqlite:///data/staffdesk.db", validation_alias=AliasChoices("DB_URL", "DATABASE_URL"))
    JWT_SECRET: str = "change-me"
    JWT_TTL_MIN: int = 60 * 24
    ALLOWED_ORIGINS: Annotated[list[str], NoDecode] = Field(default_factory=list)
    UPLOAD_MAX_BYTES: int = 10 * 1024 * 1024
    ADMIN_EMAIL: str = ""
    ADMIN_PASSWORD: str = ""
    ADMIN_NAME: str = "Administrator"
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # ---- client
    API_URL: str = Field(
        default="http://localhost:5000",
        validation_alias=AliasChoices("API_URL", "STAFFDESK_API_URL"),
    )
    STORAGE_FILE: Path | None = None
    GEOCODE_URL: str = "https://nominatim.openstreetmap.org/reverse"
    GEOCODE_USER_AGENT: str = "staffdesk-client"
    GEO_FIX_TIMEOUT: float = 10.0
    GEO_WATCH_TIMEOUT: float = 15.0
    LIVE_UPDATE_INTERVAL: float = 30.0

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @property
    def storage_file(self) -> Path:
        return self.STORAGE_FILE if self.STORAGE_FILE is not None else self.DATA_DIR / "storage.json"

    @property
    def documents_dir(self) -> Path:
        return self.DATA_DIR / "documents"

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value: Any) -> list[str]:
        if value in (None, "", []):
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, Iterable):
            return [str(item).strip() for item in value if str(item).strip()]
        raise TypeError("ALLOWED_ORIGINS must be a comma separated string or list")

    @field_validator("API_URL")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    return settings


settings = get_settings()
