# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    DATABASE_URL: str = Field(default="sqlite:///./helpdesk.db")
    APP_NAME: str = "Helpdesk API"
    APP_DESC: str = "Helpdesk ticketing with SLA deadlines"
    APP_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    SQL_ECHO: bool = False

    # Comma separated, unset means allow all
    CORS_ORIGINS: str | None = None

    # Browser client, served at / when set
    STATIC_DIR: str | None = None

    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Pydantic v2 style config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origins(self) -> list[str]:
        if not self.CORS_ORIGINS:
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
