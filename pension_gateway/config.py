"""Configuration management using Pydantic Settings"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./pension_gateway.db"
    db_pool_size: int = 10
    db_max_overflow: int = 10
    db_pool_recycle_seconds: int = 3600

    # Service
    service_name: str = "pension-gateway"
    log_level: str = "INFO"

    # Ingestion
    ingest_max_workers: int = 4
    import_dir: Optional[str] = None  # Workbooks here are imported on startup

    # Pagination
    default_page_size: int = 10
    max_page_size: int = 100


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings instance for the composition root"""
    return Settings()
