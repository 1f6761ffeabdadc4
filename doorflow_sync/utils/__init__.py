"""
doorflow_sync.utils - Utility module

Common utilities including logging configuration.
"""

from doorflow_sync.utils.normalization import normalize_email
from doorflow_sync.utils.paths import DEFAULT_CONFIG_DIR, resolve_config_dir

__all__ = ["normalize_email", "resolve_config_dir", "DEFAULT_CONFIG_DIR"]
