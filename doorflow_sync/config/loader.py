"""
Configuration loader module for DoorFlow member synchronization.

Provides YAML-based configuration file loading with support for:
- Loading configuration from default or custom paths
- Graceful handling of missing configuration files
- Basic validation of configuration structure
- Environment variable overrides for DoorFlow credentials
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from doorflow_sync.api.doorflow_api import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from doorflow_sync.auth.doorflow_auth import DEFAULT_REDIRECT_URI
from doorflow_sync.utils.logging import LOG_LEVELS
from doorflow_sync.utils.paths import (
    resolve_config_dir,
    resolve_data_dir,
    resolve_log_dir,
    resolve_photo_dir,
)

# Default configuration file name
DEFAULT_CONFIG_FILE = "config.yaml"

# Environment variables that take precedence over the file
ENV_OVERRIDES = {
    "client_id": "DOORFLOW_CLIENT_ID",
    "client_secret": "DOORFLOW_CLIENT_SECRET",
    "api_url": "DOORFLOW_API_URL",
    "log_level": "DOORFLOW_SYNC_LOG_LEVEL",
}

# Any of these values in DOORFLOW_SYNC_DEBUG turns on verbose logging
ENV_DEBUG = "DOORFLOW_SYNC_DEBUG"
DEBUG_VALUES = ("1", "true", "yes")

# Settings that must be present before connecting to DoorFlow
REQUIRED_KEYS = ("client_id", "client_secret")

DEFAULT_LOG_RETENTION_COUNT = 10
DEFAULT_LOG_LEVEL = "INFO"

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


class ConfigLoader:
    """
    YAML configuration file loader.

    Attributes:
        config_dir: Directory containing the configuration file
        config_file: Name of the configuration file

    Usage:
        loader = ConfigLoader()
        config = loader.load()

        # Load from specific file
        config = loader.load_from_file("/path/to/config.yaml")
    """

    def __init__(
        self, config_dir: Path | None = None, config_file: str = DEFAULT_CONFIG_FILE
    ):
        """
        Initialize the configuration loader.

        Args:
            config_dir: Directory containing the configuration file.
                       Defaults to ~/.doorflow-sync/ or $DOORFLOW_SYNC_CONFIG_DIR
            config_file: Name of the configuration file (default: config.yaml)
        """
        self.config_dir = resolve_config_dir(config_dir)
        self.config_file = config_file

    def _get_config_path(self) -> Path:
        return self.config_dir / self.config_file

    def load(self) -> dict[str, Any]:
        """
        Load configuration from the default configuration file.

        Returns:
            Dictionary containing configuration values, or empty dict if file
            doesn't exist

        Raises:
            ConfigError: If the configuration file exists but cannot be parsed
        """
        return self.load_from_file(self._get_config_path())

    def load_from_file(self, path: Path | str) -> dict[str, Any]:
        """
        Load configuration from a specific file.

        Returns an empty dict if the file doesn't exist, allowing
        graceful operation with CLI defaults.

        Args:
            path: Path to the configuration file

        Returns:
            Dictionary containing configuration values

        Raises:
            ConfigError: If the configuration file exists but cannot be parsed
        """
        path = Path(path)

        if not path.exists():
            logger.debug(f"Configuration file not found: {path}")
            return {}

        try:
            with open(path, encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML configuration file: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read configuration file: {e}") from e

        # Handle empty files
        if config is None:
            logger.debug(f"Configuration file is empty: {path}")
            return {}

        if not isinstance(config, dict):
            raise ConfigError(
                f"Configuration file must contain a YAML dictionary, "
                f"got {type(config).__name__}"
            )

        logger.debug(f"Loaded configuration from {path}")
        return config

    def validate(self, config: dict[str, Any]) -> None:
        """
        Validate configuration structure and values.

        Unknown keys are ignored.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ConfigError: If configuration is invalid
        """
        if not isinstance(config, dict):
            raise ConfigError(
                f"Configuration must be a dictionary, got {type(config).__name__}"
            )

        valid_keys: dict[str, type[Any] | tuple[type[Any], ...]] = {
            # DoorFlow connection
            "client_id": str,
            "client_secret": str,
            "api_url": str,
            "redirect_uri": str,
            "request_timeout": (int, float),
            # Storage locations
            "data_dir": str,
            "photo_dir": str,
            # Logging options
            "log_dir": str,
            "log_level": str,
            "log_retention_count": int,
            "verbose": bool,
            # Sync behavior
            "dry_run": bool,
            "create_missing": bool,
        }

        for key, value in config.items():
            if key not in valid_keys:
                continue
            expected_type = valid_keys[key]
            # bool is an int subclass; reject it for numeric keys
            is_bool_for_number = isinstance(value, bool) and expected_type is not bool
            if not isinstance(value, expected_type) or is_bool_for_number:
                if isinstance(expected_type, tuple):
                    type_name = " or ".join(t.__name__ for t in expected_type)
                else:
                    type_name = expected_type.__name__
                raise ConfigError(
                    f"Invalid type for '{key}': expected {type_name}, "
                    f"got {type(value).__name__}"
                )

        if "request_timeout" in config and config["request_timeout"] <= 0:
            raise ConfigError(
                f"request_timeout must be > 0, got {config['request_timeout']}"
            )

        if "log_retention_count" in config and config["log_retention_count"] < 1:
            raise ConfigError(
                f"log_retention_count must be >= 1, got {config['log_retention_count']}"
            )

        if "log_level" in config and config["log_level"].upper() not in LOG_LEVELS:
            raise ConfigError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, "
                f"got {config['log_level']}"
            )

        if "api_url" in config and not config["api_url"].startswith(
            ("http://", "https://")
        ):
            raise ConfigError(
                f"api_url must start with http:// or https://, got {config['api_url']}"
            )

    def load_and_validate(self) -> dict[str, Any]:
        """
        Load configuration and validate it.

        Returns:
            Validated configuration dictionary

        Raises:
            ConfigError: If configuration cannot be loaded or is invalid
        """
        config = self.load()
        if config:
            self.validate(config)
        return config


@dataclass
class AppConfig:
    """
    Resolved application settings.

    Built from the YAML file with environment overrides applied and all
    directories resolved against the configuration directory.
    """

    config_dir: Path
    data_dir: Path
    photo_dir: Path
    log_dir: Path
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    api_url: str = DEFAULT_BASE_URL
    redirect_uri: str = DEFAULT_REDIRECT_URI
    request_timeout: float = DEFAULT_TIMEOUT
    log_retention_count: int = DEFAULT_LOG_RETENTION_COUNT
    log_level: str = DEFAULT_LOG_LEVEL
    verbose: bool = False
    dry_run: bool = False
    create_missing: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(
        cls,
        config: dict[str, Any],
        config_dir: Path,
        environ: Optional[dict[str, str]] = None,
    ) -> "AppConfig":
        """
        Build settings from a loaded configuration dictionary.

        Args:
            config: Validated configuration values
            config_dir: Resolved configuration directory
            environ: Environment to read overrides from (default: os.environ)

        Returns:
            AppConfig instance
        """
        env = os.environ if environ is None else environ
        values = dict(config)

        for key, env_var in ENV_OVERRIDES.items():
            if env.get(env_var):
                values[key] = env[env_var]

        known = {
            "client_id",
            "client_secret",
            "api_url",
            "redirect_uri",
            "request_timeout",
            "log_retention_count",
            "log_level",
            "verbose",
            "dry_run",
            "create_missing",
            "data_dir",
            "photo_dir",
            "log_dir",
        }
        verbose = values.get("verbose", False)
        if env.get(ENV_DEBUG, "").lower() in DEBUG_VALUES:
            verbose = True

        return cls(
            config_dir=config_dir,
            data_dir=resolve_data_dir(config_dir, values.get("data_dir")),
            photo_dir=resolve_photo_dir(config_dir, values.get("photo_dir")),
            log_dir=resolve_log_dir(config_dir, values.get("log_dir")),
            client_id=values.get("client_id") or None,
            client_secret=values.get("client_secret") or None,
            api_url=(values.get("api_url") or DEFAULT_BASE_URL).rstrip("/"),
            redirect_uri=values.get("redirect_uri") or DEFAULT_REDIRECT_URI,
            request_timeout=values.get("request_timeout", DEFAULT_TIMEOUT),
            log_retention_count=values.get(
                "log_retention_count", DEFAULT_LOG_RETENTION_COUNT
            ),
            log_level=(values.get("log_level") or DEFAULT_LOG_LEVEL).upper(),
            verbose=verbose,
            dry_run=values.get("dry_run", False),
            create_missing=values.get("create_missing", False),
            extra={k: v for k, v in values.items() if k not in known},
        )

    @classmethod
    def load(
        cls,
        config_dir: Path | str | None = None,
        config_file: Path | str | None = None,
    ) -> "AppConfig":
        """
        Load, validate and resolve settings.

        Args:
            config_dir: Configuration directory override
            config_file: Explicit configuration file path

        Raises:
            ConfigError: If the file cannot be parsed or is invalid
        """
        loader = ConfigLoader(config_dir=config_dir)
        if config_file is not None:
            config = loader.load_from_file(config_file)
        else:
            config = loader.load()
        if config:
            loader.validate(config)
        return cls.from_dict(config, loader.config_dir)

    @property
    def missing_config(self) -> list[str]:
        """Names of required DoorFlow settings that are not set."""
        return [key for key in REQUIRED_KEYS if not getattr(self, key)]
