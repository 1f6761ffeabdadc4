"""
doorflow_sync.config - Configuration management module

Contains configuration loading, validation, and default settings.
"""

from doorflow_sync.config.loader import AppConfig, ConfigError, ConfigLoader

__all__ = ["AppConfig", "ConfigError", "ConfigLoader"]
