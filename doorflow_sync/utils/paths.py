"""
Path utilities for configuration and data directory resolution.

Provides consistent path resolution for the doorflow-sync configuration
directory across all modules.
"""

from __future__ import annotations

import os
from pathlib import Path

# Default configuration directory
DEFAULT_CONFIG_DIR = Path.home() / ".doorflow-sync"

# Environment variable for overriding config directory
CONFIG_DIR_ENV_VAR = "DOORFLOW_SYNC_CONFIG_DIR"

# Subdirectory names inside the config directory
DATA_DIR_NAME = "data"
PHOTO_DIR_NAME = "photos"
LOG_DIR_NAME = "logs"


def resolve_config_dir(config_dir: Path | str | None = None) -> Path:
    """
    Resolve the configuration directory path.

    Priority:
        1. Explicit config_dir parameter (if provided)
        2. DOORFLOW_SYNC_CONFIG_DIR environment variable
        3. Default directory (~/.doorflow-sync)

    Args:
        config_dir: Optional explicit configuration directory path.
                   Can be a Path object or string.

    Returns:
        Resolved Path to the configuration directory (expanduser and resolve applied)
    """
    if config_dir is not None:
        return Path(config_dir).expanduser().resolve()

    env_dir = os.environ.get(CONFIG_DIR_ENV_VAR)
    if env_dir:
        return Path(env_dir).expanduser().resolve()

    return DEFAULT_CONFIG_DIR.expanduser().resolve()


def resolve_data_dir(config_dir: Path, data_dir: Path | str | None = None) -> Path:
    """Directory holding members.json, teams.json and tokens.json."""
    if data_dir:
        return Path(data_dir).expanduser().resolve()
    return config_dir / DATA_DIR_NAME


def resolve_photo_dir(config_dir: Path, photo_dir: Path | str | None = None) -> Path:
    """Directory searched for member photos."""
    if photo_dir:
        return Path(photo_dir).expanduser().resolve()
    return config_dir / PHOTO_DIR_NAME


def resolve_log_dir(config_dir: Path, log_dir: Path | str | None = None) -> Path:
    """Directory holding the dated log files."""
    if log_dir:
        return Path(log_dir).expanduser().resolve()
    return config_dir / LOG_DIR_NAME
