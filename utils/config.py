"""
Configuration Utility - Environment Variables Management

Centralized configuration loading from .env files using pydantic-settings.
Type-safe access to all run parameters of a harvest.

Usage:
    from utils.config import settings

    base_url = settings.API_BASE_URL
    page_size = settings.HARVEST_PAGE_SIZE
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Credentials (required at run time, checked by the harvest job)
    JWT_TOKEN: str = Field(default="")

    # API Configuration
    API_BASE_URL: str = Field(default="https://data.inaproc.id/api")
    API_RESOURCE_PATH: str = Field(default="ekatalog-archive/paket-e-purchasing")
    API_TIMEOUT: float = Field(default=30.0, ge=0)

    # Harvest Parameters
    HARVEST_YEAR: int = Field(default=2024)
    HARVEST_KODE_KLPD: str = Field(default="K34")
    HARVEST_PAGE_SIZE: int = Field(default=100, gt=0)
    HARVEST_DELAY_SECONDS: float = Field(default=1.0, ge=0)

    # Rate-limit retry (0 retries keeps a 429 terminal)
    HARVEST_MAX_RETRIES: int = Field(default=0, ge=0)
    HARVEST_RETRY_STATUS_CODES: list[int] = Field(default=[429])
    HARVEST_RETRY_BACKOFF_MIN: float = Field(default=2.0, ge=0)
    HARVEST_RETRY_BACKOFF_MAX: float = Field(default=60.0, ge=0)

    # Output
    OUTPUT_DIR: str = Field(default=".")
    OUTPUT_FILENAME_PREFIX: str = Field(default="hasil_rup")
    EMERGENCY_FILENAME_PREFIX: str = Field(default="rup")
    DATASET_LABEL: str = Field(default="RUP")

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")

    # Application Metadata
    APP_NAME: str = Field(default="inaproc-harvester")
    APP_VERSION: str = Field(default="0.1.0")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Singleton Settings instance
    """
    return Settings()


# Global settings instance
settings = get_settings()
