"""
Configuration file generator for DoorFlow member synchronization.

Generates a default configuration file documenting every option.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def generate_default_config() -> str:
    """
    Generate default YAML configuration with all options documented.

    Returns:
        String containing YAML configuration with comments
    """
    return """# DoorFlow Member Sync Configuration
# ==================================
#
# Default options for doorflow-sync.
# CLI arguments always override these values, and the environment
# variables DOORFLOW_CLIENT_ID, DOORFLOW_CLIENT_SECRET and DOORFLOW_API_URL
# override the matching keys below.
#
# To use this configuration:
#   1. Save as ~/.doorflow-sync/config.yaml (or custom location)
#   2. Uncomment and modify options as needed
#   3. Run doorflow-sync commands normally

# DoorFlow Connection
# -------------------

# OAuth application credentials from the DoorFlow developer portal
# client_id: your-client-id
# client_secret: your-client-secret

# DoorFlow host
# Default: https://api.doorflow.com
# api_url: https://api.doorflow.com

# Redirect URI registered with the DoorFlow application
# Default: http://localhost:3000/api/auth/callback
# redirect_uri: http://localhost:3000/api/auth/callback

# Timeout for DoorFlow API requests, in seconds
# Default: 30
# request_timeout: 30


# Storage
# -------

# Directory holding members.json, teams.json and tokens.json
# Default: ~/.doorflow-sync/data
# data_dir: /path/to/data

# Directory searched for member photos, named firstname_lastname.png
# Default: ~/.doorflow-sync/photos
# photo_dir: /path/to/photos


# Logging Options
# ---------------

# Enable verbose output with detailed logging
# Default: false
# verbose: true

# Directory for log files
# Default: ~/.doorflow-sync/logs
# log_dir: /path/to/logs

# Console log level: DEBUG, INFO, WARNING, ERROR or CRITICAL
# Overridden by DOORFLOW_SYNC_LOG_LEVEL; DOORFLOW_SYNC_DEBUG=1 forces verbose
# Default: INFO
# log_level: INFO

# Number of log files to keep
# Default: 10
# log_retention_count: 10


# Sync Behavior
# -------------

# Preview changes without applying them (dry-run mode)
# Default: false
# dry_run: false

# Create DoorFlow people for members with no email match
# Default: false
# create_missing: false
"""


def save_config_file(
    config_path: Path, overwrite: bool = False
) -> tuple[bool, str | None]:
    """
    Save default configuration file to specified path.

    Args:
        config_path: Path where the config file should be saved
        overwrite: If True, overwrite existing file. If False, fail if file exists.

    Returns:
        Tuple of (success, error_message); error_message is None on success
    """
    try:
        config_path = config_path.expanduser().resolve()

        if config_path.exists() and not overwrite:
            return (
                False,
                f"Configuration file already exists: {config_path}\n"
                "Use --force to overwrite.",
            )

        config_path.parent.mkdir(parents=True, mode=0o700, exist_ok=True)
        config_path.write_text(generate_default_config(), encoding="utf-8")

        # Holds the client secret once edited
        config_path.chmod(0o600)

        logger.info(f"Created configuration file: {config_path}")
        return (True, None)

    except OSError as e:
        error_msg = f"Failed to create configuration file: {e}"
        logger.error(error_msg)
        return (False, error_msg)
