"""
Unified configuration management for catalog clients.
"""
import os
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional, get_type_hints
from dataclasses import dataclass, asdict
from enum import Enum

import requests
import yaml

from consul_catalog.catalog.client import DEFAULT_ADDRESS, CatalogConfig
from consul_catalog.catalog.watcher import ExponentialBackoff
from consul_catalog.common.utils import base_url, validate_url

logger = logging.getLogger(__name__)


class ConfigSource(str, Enum):
    """Configuration source priority."""
    ENV = "environment"
    FILE = "file"
    DEFAULT = "default"


@dataclass
class ClientSettings:
    """Client settings dataclass."""
    # Catalog server settings
    address: str = DEFAULT_ADDRESS
    scheme: str = "http"
    datacenter: Optional[str] = None
    token: Optional[str] = None

    # Query settings
    wait_time: Optional[float] = None
    timeout: Optional[float] = 5.0

    # Watch retry settings
    backoff_initial: float = 1.0
    backoff_max: float = 60.0
    backoff_factor: float = 2.0
    max_failures: int = 0

    # Logging settings
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    log_max_bytes: int = 10 * 1024 * 1024  # 10MB
    log_backup_count: int = 5
    log_rotation_strategy: str = "size"


_FIELD_TYPES = get_type_hints(ClientSettings)
_OPTIONAL_TYPES = (Optional[str], Optional[float], Optional[int])
_NUMERIC_FIELDS = tuple(
    name for name, field_type in _FIELD_TYPES.items()
    if field_type in (int, float, Optional[int], Optional[float])
)
_TEXT_FIELDS = tuple(
    name for name, field_type in _FIELD_TYPES.items() if field_type in (str, Optional[str])
)


def _convert(attr_name: str, value: str) -> Any:
    """Convert an environment string to the type of a settings field."""
    field_type = _FIELD_TYPES[attr_name]
    optional = field_type in _OPTIONAL_TYPES
    if optional and value.strip() == "":
        return None
    if field_type in (int, Optional[int]):
        return int(value)
    if field_type in (float, Optional[float]):
        return float(value)
    return value


def _convert_file_value(attr_name: str, value: Any) -> Any:
    """Convert a value read from a config file; strings are parsed like env values."""
    if isinstance(value, str):
        return _convert(attr_name, value)
    if value is None and _FIELD_TYPES[attr_name] not in _OPTIONAL_TYPES:
        raise ValueError(f"{attr_name} cannot be null")
    return value


class ConfigManager:
    """Unified configuration manager."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Optional path to configuration file (YAML or JSON)
        """
        self.config_file = config_file
        self.config: ClientSettings = ClientSettings()
        self.config_sources: Dict[str, ConfigSource] = {}
        self.load_config()

    def load_config(self):
        """Load configuration from all sources (file, env, defaults)."""
        # Load from file first
        if self.config_file:
            if Path(self.config_file).exists():
                self._load_from_file(self.config_file)
            else:
                logger.warning(f"Config file {self.config_file} not found, using defaults")

        # Override with environment variables
        self._load_from_env()

    def _load_from_file(self, file_path: str):
        """Load configuration from file."""
        path = Path(file_path)
        file_config = {}

        try:
            if path.suffix.lower() in ['.yaml', '.yml']:
                with open(path, 'r', encoding='utf-8') as f:
                    file_config = yaml.safe_load(f) or {}
            elif path.suffix.lower() == '.json':
                with open(path, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config file {file_path}: {e}")
            return

        if not isinstance(file_config, dict):
            logger.warning(f"Ignoring config file {file_path}: top level is not a mapping")
            return

        # Update config from file
        for key, value in file_config.items():
            if key not in _FIELD_TYPES:
                logger.debug(f"Ignoring unknown config key: {key}")
                continue
            try:
                value = _convert_file_value(key, value)
            except ValueError:
                logger.warning(f"Ignoring {key}={value!r} in {file_path}: not a valid {key}")
                continue

            setattr(self.config, key, value)
            self.config_sources[key] = ConfigSource.FILE

    def _load_from_env(self):
        """Load configuration from environment variables."""
        env_mapping = {
            # Catalog server settings
            'CONSUL_HTTP_ADDR': 'address',
            'CONSUL_HTTP_SCHEME': 'scheme',
            'CONSUL_DATACENTER': 'datacenter',
            'CONSUL_HTTP_TOKEN': 'token',

            # Query settings
            'CONSUL_CATALOG_WAIT': 'wait_time',
            'CONSUL_CATALOG_TIMEOUT': 'timeout',

            # Watch retry settings
            'CONSUL_CATALOG_BACKOFF_INITIAL': 'backoff_initial',
            'CONSUL_CATALOG_BACKOFF_MAX': 'backoff_max',
            'CONSUL_CATALOG_BACKOFF_FACTOR': 'backoff_factor',
            'CONSUL_CATALOG_MAX_FAILURES': 'max_failures',

            # Logging settings
            'LOG_LEVEL': 'log_level',
            'LOG_DIR': 'log_dir',
            'LOG_MAX_BYTES': 'log_max_bytes',
            'LOG_BACKUP_COUNT': 'log_backup_count',
            'LOG_ROTATION_STRATEGY': 'log_rotation_strategy',
        }

        for env_var, attr_name in env_mapping.items():
            value = os.getenv(env_var)
            if value is None:
                continue
            try:
                converted = _convert(attr_name, value)
            except ValueError:
                logger.warning(f"Ignoring {env_var}={value!r}: not a valid {attr_name}")
                continue

            setattr(self.config, attr_name, converted)
            self.config_sources[attr_name] = ConfigSource.ENV

    def override(self, **values: Any):
        """
        Override settings with explicit values (e.g. command line options).

        None values are skipped.
        """
        for key, value in values.items():
            if value is None:
                continue
            if not hasattr(self.config, key):
                raise KeyError(f"Unknown setting: {key}")
            setattr(self.config, key, value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        return getattr(self.config, key, default)

    def get_dict(self) -> Dict[str, Any]:
        """Get configuration as dictionary."""
        return asdict(self.config)

    def get_source(self, key: str) -> ConfigSource:
        """Get configuration source for a key."""
        return self.config_sources.get(key, ConfigSource.DEFAULT)

    def save_to_file(self, file_path: str, format: str = "yaml"):
        """
        Save current configuration to file.

        Args:
            file_path: Path to save configuration
            format: File format ('yaml' or 'json')
        """
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.get_dict()
        # Never persist credentials
        config_dict.pop('token', None)

        if format.lower() == 'yaml':
            with open(path, 'w', encoding='utf-8') as f:
                yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)
        elif format.lower() == 'json':
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(config_dict, f, indent=2, sort_keys=False)
        else:
            raise ValueError(f"Unsupported format: {format}")

    def validate(self) -> list:
        """
        Validate configuration values.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        # Settings must hold the right kind of value before they can be compared
        for name in _NUMERIC_FIELDS + _TEXT_FIELDS:
            value = getattr(self.config, name)
            if value is None and _FIELD_TYPES[name] in _OPTIONAL_TYPES:
                continue
            if name in _TEXT_FIELDS:
                if not isinstance(value, str):
                    errors.append(f"Invalid {name}: {value!r} (must be a string)")
            elif isinstance(value, bool) or not isinstance(value, (int, float)):
                errors.append(f"Invalid {name}: {value!r} (must be a number)")
        if errors:
            return errors

        # Validate address
        if not self.config.address or not validate_url(base_url(self.config.address, self.config.scheme)):
            errors.append(f"Invalid address: {self.config.address!r}")

        if self.config.scheme not in ('http', 'https'):
            errors.append(f"Invalid scheme: {self.config.scheme} (must be http or https)")

        # Validate wait and timeout
        if self.config.wait_time is not None and self.config.wait_time < 0:
            errors.append(f"Invalid wait_time: {self.config.wait_time} (must be >= 0)")

        if self.config.timeout is not None and self.config.timeout <= 0:
            errors.append(f"Invalid timeout: {self.config.timeout} (must be > 0)")

        # Validate backoff
        if self.config.backoff_initial < 0 or self.config.backoff_max < 0:
            errors.append("backoff delays must be >= 0")

        if self.config.backoff_factor < 1:
            errors.append("backoff_factor must be >= 1")

        if self.config.max_failures < 0:
            errors.append("max_failures must be >= 0")

        # Validate log_level
        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if str(self.config.log_level).upper() not in valid_log_levels:
            errors.append(f"Invalid log_level: {self.config.log_level}")

        if self.config.log_rotation_strategy not in ('size', 'time'):
            errors.append(f"Invalid log_rotation_strategy: {self.config.log_rotation_strategy}")

        return errors

    def to_catalog_config(self, http_client: Optional[requests.Session] = None) -> CatalogConfig:
        """
        Build the client configuration from the loaded settings.

        Args:
            http_client: Session to use; a new one is created if not provided
        """
        return CatalogConfig(
            address=self.config.address,
            datacenter=self.config.datacenter,
            wait_time=self.config.wait_time,
            timeout=self.config.timeout,
            token=self.config.token,
            scheme=self.config.scheme,
            http_client=http_client or requests.Session(),
        )

    def build_backoff(self) -> ExponentialBackoff:
        """Build the watch backoff policy from the loaded settings."""
        return ExponentialBackoff(
            initial_delay=self.config.backoff_initial,
            max_delay=self.config.backoff_max,
            backoff_factor=self.config.backoff_factor,
        )
