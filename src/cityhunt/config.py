"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables with CITYHUNT_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="CITYHUNT_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3000
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"
    log_format: str = "json"

    # --- MongoDB ---
    mongodb_uri: str = "mongodb://localhost:27017"
    db_name: str = "cityhunt"
    mongodb_server_selection_timeout_ms: int = 5000

    # --- Listing ---
    default_page_size: int = 10
    max_page_size: int = 100
    ranking_limit: int = 20


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
