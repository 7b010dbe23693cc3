from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env pe host; în container variabilele vin din environment
load_dotenv(override=False)


def _csv(raw: Optional[str]) -> List[str]:
    return [p.strip() for p in (raw or "").split(",") if p.strip()]


class Settings(BaseSettings):
    # App
    APP_TITLE: str = "inventory-api"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"
    ROOT_PATH: Optional[str] = None
    DISABLE_DOCS: bool = False
    BUILD_SHA: str = Field("", validation_alias="GIT_SHA")

    # DB
    DATABASE_URL: str = Field(
        "sqlite:///./inventory.db",
        description="ex. postgresql+psycopg://appuser:<PASS>@db:5432/appdb",
    )
    DB_SCHEMA: Optional[str] = None
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 1800  # sec
    DB_POOL_TIMEOUT: int = 30    # sec
    DB_CREATE_ALL: bool = True

    # HTTP
    CORS_ORIGINS: Optional[str] = None
    TRUSTED_HOSTS: Optional[str] = None
    ENABLE_HSTS: bool = False
    MAX_BODY_SIZE_BYTES: int = 0  # 0 = dezactivat

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    @field_validator("ROOT_PATH", "DB_SCHEMA")
    @classmethod
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        return v or None

    @field_validator("DATABASE_URL")
    @classmethod
    def _fix_database_url(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("DATABASE_URL must not be empty")
        # postgres:// (Heroku & co.) -> driver psycopg explicit
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+psycopg://", 1)
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def cors_origins(self) -> List[str]:
        return _csv(self.CORS_ORIGINS)

    @property
    def trusted_hosts(self) -> List[str]:
        return _csv(self.TRUSTED_HOSTS)


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
