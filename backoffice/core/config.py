# backoffice/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (relational store connection string)
      - JWT_SECRET (secret used to verify bearer tokens)

    Optional:
      - DB_ECHO / DB_POOL_SIZE / DB_MAX_OVERFLOW / DB_REQUIRE_SSL
      - LOG_LEVEL
      - DEFAULT_PAGE_SIZE / MAX_PAGE_SIZE
      - CORS_ORIGINS
    """

    PROJECT_NAME: str = "Home & Garden Back Office"
    API_V1_STR: str = "/api/v1"

    # Relational store
    DATABASE_URL: str
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_REQUIRE_SSL: bool = False

    # JWT verification (backend-side)
    JWT_SECRET: str
    JWT_ALG: str = "HS256"

    LOG_LEVEL: str = "INFO"

    # Listing defaults
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
