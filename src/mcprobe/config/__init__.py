"""
mcprobe configuration.

- Module config file with the memcached instance list
- Pydantic-based process settings (environment variables, .env files)
"""

from mcprobe.config.loader import (
    DEFAULT_CONFIG_FILE,
    ProbeConfig,
    load_probe_config,
    parse_config_text,
)
from mcprobe.config.settings import Settings, get_settings

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "ProbeConfig",
    "load_probe_config",
    "parse_config_text",
    "Settings",
    "get_settings",
]
