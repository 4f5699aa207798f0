"""
Process settings using Pydantic.

Provides environment-based configuration loading with MCPROBE_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from mcprobe.config.loader import DEFAULT_CONFIG_FILE
from mcprobe.endpoints import DEFAULT_HOST


class Settings(BaseSettings):
    """Probe settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MCPROBE_",
    )

    # Module config file holding memcached_inst_ports
    config_file: str = DEFAULT_CONFIG_FILE

    # Item processing timeout in seconds (0 = transport default)
    timeout: float = 0

    # Host used by stat/ping when --host is not given
    default_host: str = DEFAULT_HOST

    # Logging
    log_level: str = "WARNING"
    log_format: str = "json"  # json, console


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
