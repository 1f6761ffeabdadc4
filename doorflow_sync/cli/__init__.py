"""CLI package for doorflow_sync."""

from doorflow_sync.cli.formatters import (
    event_label,
    show_member_detail,
    show_sync_details,
)
from doorflow_sync.cli.main import (
    NOT_AUTHENTICATED_MESSAGE,
    cli,
    get_config_dir,
    get_config_file,
)
from doorflow_sync.utils import DEFAULT_CONFIG_DIR

__all__ = [
    "DEFAULT_CONFIG_DIR",
    "NOT_AUTHENTICATED_MESSAGE",
    "cli",
    "event_label",
    "get_config_dir",
    "get_config_file",
    "show_member_detail",
    "show_sync_details",
]
