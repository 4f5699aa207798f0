"""
Module configuration file loading.

The file uses agent-style ``Key=Value`` lines::

    # comma separated list of [host:]port
    memcached_inst_ports=11211,10.0.0.5:11212

Files ending in ``.yaml`` or ``.yml`` are read as a YAML mapping with the
same key. Unknown keys are rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml

from mcprobe.core.errors import ConfigurationError
from mcprobe.endpoints import Endpoint, parse_endpoints

logger = structlog.get_logger()

DEFAULT_CONFIG_FILE = "/etc/zabbix/zbx_module_memcached.conf"

INSTANCE_PORTS_KEY = "memcached_inst_ports"
KNOWN_KEYS = frozenset({INSTANCE_PORTS_KEY})

MISSING_PORTS_MESSAGE = (
    f"Parameter {INSTANCE_PORTS_KEY} must be defined, example: 11211,11212"
)


@dataclass(frozen=True)
class ProbeConfig:
    """Loaded module configuration."""

    instance_ports: str | None = None
    source: Path | None = None

    def endpoints(self) -> list[Endpoint]:
        return parse_endpoints(self.instance_ports)


def parse_config_text(text: str, source: str = "<string>") -> dict[str, str]:
    """
    Parse ``Key=Value`` lines.

    Raises:
        ConfigurationError: On a line without ``=``, an empty key, or an
            unknown key
    """
    values: dict[str, str] = {}
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ConfigurationError(
                f"Invalid entry in config file {source}",
                details={"line": lineno},
            )
        if key not in KNOWN_KEYS:
            raise ConfigurationError(
                f"Unknown parameter [{key}] in config file {source}",
                details={"line": lineno},
            )
        values[key] = value.strip()

    return values


def _parse_yaml(text: str, source: str) -> dict[str, str]:
    try:
        data: Any = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {source}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {source} must contain a mapping")

    values: dict[str, str] = {}
    for key, value in data.items():
        if key not in KNOWN_KEYS:
            raise ConfigurationError(f"Unknown parameter [{key}] in config file {source}")
        if value is None:
            continue
        if isinstance(value, list):
            value = ",".join(str(item) for item in value)
        values[key] = str(value)
    return values


def load_probe_config(
    path: str | Path | None = None,
    required: bool = True,
) -> ProbeConfig:
    """
    Load the module configuration.

    Args:
        path: Config file path, defaults to DEFAULT_CONFIG_FILE
        required: If True, a missing file or missing memcached_inst_ports is an
            error; otherwise an empty config is returned

    Raises:
        ConfigurationError: On unreadable or malformed files, or when a
            required value is missing
    """
    config_path = Path(path or DEFAULT_CONFIG_FILE)
    logger.info("loading_module_config", path=str(config_path))

    if not config_path.exists():
        if required:
            logger.warning("module_config_missing", path=str(config_path))
            raise ConfigurationError(
                f"Cannot open config file {config_path}",
                details={"hint": MISSING_PORTS_MESSAGE},
            )
        return ProbeConfig()

    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {config_path}: {e}") from e

    if config_path.suffix in (".yaml", ".yml"):
        values = _parse_yaml(text, str(config_path))
    else:
        values = parse_config_text(text, str(config_path))

    instance_ports = values.get(INSTANCE_PORTS_KEY)
    if required and instance_ports is None:
        logger.warning("module_config_incomplete", path=str(config_path))
        raise ConfigurationError(MISSING_PORTS_MESSAGE)

    logger.debug("loaded_module_config", path=str(config_path), instance_ports=instance_ports)
    return ProbeConfig(instance_ports=instance_ports, source=config_path)
