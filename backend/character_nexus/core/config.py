"""
Application configuration using Pydantic Settings.

All values can be overridden through environment variables or a local .env file.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["development", "production", "test"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    VERSION: str = "0.1.0"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./db.sqlite"

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    ALLOWED_ORIGINS: List[str] = Field(default=["http://localhost:5173"])

    # ===========================================
    # Images
    # ===========================================
    IMAGE_DIR: str = "./characters/images"
    MAX_IMAGE_SIZE: int = 5 * 1024 * 1024  # 5MB
    IMAGE_MAX_DIMENSION: int = 1024
    IMAGE_QUALITY: int = 80
    IMAGE_DOWNLOAD_TIMEOUT_SECONDS: float = 30.0

    # ===========================================
    # Character import
    # ===========================================
    SCRAPE_TIMEOUT_SECONDS: float = 30.0
    ALLOWED_SCRAPE_DOMAINS: List[str] = Field(
        default=["janitorai.com", "www.janitorai.com"]
    )
    FORBIDDEN_SCRAPE_PATHS: List[str] = Field(
        default=["/admin", "/api", "/settings", "/account", "/login", "/logout", "/dashboard"]
    )
    IMPORT_DEFAULT_UNIVERSE: str = "JanitorAI"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
