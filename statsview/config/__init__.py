"""
Configuration management for Statsview.

Handles loading and validation of configuration files.
"""

from statsview.config.settings import (
    LoggingConfig,
    ServerConfig,
    StatsviewConfig,
    get_default_config,
    get_default_config_path,
    load_config,
)

__all__ = [
    "LoggingConfig",
    "ServerConfig",
    "StatsviewConfig",
    "get_default_config",
    "get_default_config_path",
    "load_config",
]
