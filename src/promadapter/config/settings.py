"""
Process settings using Pydantic.

Provides environment-based configuration loading with PROMADAPTER_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROMADAPTER_",
    )

    # Rule file; the built-in default rule set is used when unset
    config_file: str | None = None

    # Default rule set parameters
    label_prefix: str = ""
    rate_interval: str = "5m"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
