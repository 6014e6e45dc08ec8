"""
Application configuration management
"""
from functools import lru_cache
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    # Supabase
    SUPABASE_URL: str
    SUPABASE_PUBLISHABLE_KEY: str
    SUPABASE_SECRET_KEY: str

    # Application
    APP_ENV: str = "development"
    APP_NAME: str = "Recipe Share API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8081"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Uvicorn Workers (0 = auto-calculate based on CPU cores)
    UVICORN_WORKERS: int = 0

    # Logging
    LOG_LEVEL: str = "INFO"

    # Error tracking
    SENTRY_DSN: Optional[str] = None

    # Notifications are mirrored to Redis pub/sub when set
    REDIS_URL: Optional[str] = None

    # Storage bucket holding recipe pictures and avatars
    PHOTO_BUCKET: str = "recipe-images"

    # Recipe assembly
    RESOLUTION_TIMEOUT_SECONDS: float = 5.0
    RECENTS_SIZE: int = Field(10, ge=1)
    # Recipes assembled at once when building a page
    ASSEMBLY_CONCURRENCY: int = Field(4, ge=1)
    FEATURED_LIMIT: int = 25

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.APP_ENV == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
