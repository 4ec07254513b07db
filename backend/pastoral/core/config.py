from functools import lru_cache
from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    PROJECT_NAME: str = "Pastoral Care Calendar API"
    API_STR: str = "/api"
    ENVIRONMENT: str = "local"
    DATABASE_URL: str = "sqlite:///../pastoral.db"
    SECRET_KEY: str = "changeme"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    JWT_ALGORITHM: str = "HS256"
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    LOG_LEVEL: str = "INFO"

    # "Today" for reminder expiry is the calendar day in this zone
    LOCAL_TIMEZONE: str = "UTC"
    REMINDER_COMPACT_LIMIT: int = 3
    CARE_NOTES_PAGE_SIZE: int = 50
    NOTICE_DURATION_MS: int = 5000

    # Redis pub/sub fan-out of store changes between worker processes
    REDIS_URL: str = "redis://localhost:6379/0"
    REALTIME_REDIS_ENABLED: bool = False

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: List[str] | str) -> List[str]:
        """Allow both comma-separated strings and list inputs."""
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("LOCAL_TIMEZONE")
    @classmethod
    def check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @property
    def local_tz(self) -> ZoneInfo:
        return ZoneInfo(self.LOCAL_TIMEZONE)


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
