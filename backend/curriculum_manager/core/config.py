"""
Curriculum Manager - Core Configuration
Pydantic Settings for application configuration with environment variable support
"""
from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    APP_NAME: str = "Curriculum Manager"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    LOG_LEVEL: str = "INFO"

    # API
    API_PREFIX: str = "/api"

    # Database
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "curriculum_db"

    # Full URL; assembled from the POSTGRES_* parts when not set
    DATABASE_URL: str | None = None
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    @model_validator(mode="after")
    def assemble_database_url(self) -> "Settings":
        if not self.DATABASE_URL:
            self.DATABASE_URL = (
                f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )
        return self

    # Seed the sample KG curriculum when the database starts empty
    AUTO_SEED: bool = True

    # Local store (browser local-storage equivalent)
    LOCAL_STORE_PATH: str = "curriculum-store.json"
    LOCAL_STORE_KEY: str = "curriculum-manager-data"
    SETTINGS_STORE_KEY: str = "curriculum-portal-settings"
    STORAGE_QUOTA_BYTES: int = 5 * 1024 * 1024

    # Remote store
    API_BASE_URL: str = "http://localhost:3001/api"
    API_TIMEOUT_SECONDS: float = 30.0

    # Editor
    DURATION_DEBOUNCE_SECONDS: float = 2.0

    # CORS - stored as comma-separated string
    CORS_ORIGINS_STR: str = "http://localhost:5173"

    @property
    def CORS_ORIGINS(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.CORS_ORIGINS_STR.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
