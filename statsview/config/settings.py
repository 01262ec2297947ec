"""
Configuration management for Statsview.

Loads YAML configuration from file with sensible defaults and validation.
Supports environment variable substitution using ${ENV_VAR} syntax.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from statsview.exceptions import ConfigurationLoadError, InvalidConfigurationError
from statsview.logging_config import get_logger

logger = get_logger(__name__)


def _expand_env_vars(value: Any) -> Any:
    """
    Recursively expand environment variables in configuration values.

    Supports ${ENV_VAR} syntax with optional default values: ${ENV_VAR:default}

    Args:
        value: Configuration value (string, dict, list, or other)

    Returns:
        Value with environment variables expanded

    Examples:
        "${STATSVIEW_LOCAL_IP}" -> value of STATSVIEW_LOCAL_IP env var
        "${STATSVIEW_ROLE:storage}" -> value of STATSVIEW_ROLE or "storage" if not set
    """
    if isinstance(value, str):
        # Pattern matches ${VAR} or ${VAR:default}
        pattern = r'\$\{([^}:]+)(?::([^}]*))?\}'

        def replace_env_var(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default_value)

        return re.sub(pattern, replace_env_var, value)
    elif isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    else:
        return value


@dataclass
class ServerConfig:
    """
    Web service configuration.

    ``local_ip`` is the address advertised in monitor output. When empty the
    hostname of this machine is used instead. ``port`` is both the listening
    port and the port advertised in monitor output.
    """

    host: str = "0.0.0.0"
    port: int = 11000
    local_ip: str = ""
    role: str = "unknown"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""
    format: str = "console"


@dataclass
class StatsviewConfig:
    """Main Statsview configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_default_config_path() -> str:
    """Get the default configuration file path."""
    return os.path.expanduser("~/.statsview/config.yaml")


def get_default_config() -> StatsviewConfig:
    """
    Get default configuration with sensible defaults.

    Returns:
        StatsviewConfig: Default configuration object
    """
    return StatsviewConfig(
        server=ServerConfig(),
        logging=LoggingConfig(),
    )


def load_config(config_path: Optional[str] = None) -> StatsviewConfig:
    """
    Load configuration from YAML file with validation.

    If config file is not found, returns default configuration.
    If config file is malformed or invalid, raises ConfigurationError.

    Args:
        config_path: Path to configuration file. If None, uses default path.

    Returns:
        StatsviewConfig: Loaded and validated configuration

    Raises:
        ConfigurationLoadError: If the configuration file cannot be read
        InvalidConfigurationError: If configuration is invalid or malformed
    """
    if config_path is None:
        config_path = get_default_config_path()

    config_path = os.path.expanduser(config_path)

    if not os.path.exists(config_path):
        logger.info(f"Configuration file not found at {config_path}, using defaults")
        return get_default_config()

    try:
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f)
        logger.debug(f"Loaded configuration from {config_path}")
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration file '{config_path}': {e}", exc_info=True)
        raise InvalidConfigurationError(
            f"Failed to parse YAML configuration file '{config_path}': {e}"
        ) from e
    except OSError as e:
        logger.error(f"Failed to read configuration file '{config_path}': {e}", exc_info=True)
        raise ConfigurationLoadError(
            f"Failed to read configuration file '{config_path}': {e}"
        ) from e

    if config_data is None:
        logger.info(f"Configuration file {config_path} is empty, using defaults")
        return get_default_config()

    if not isinstance(config_data, dict):
        raise InvalidConfigurationError(
            f"Invalid configuration in '{config_path}': top level must be a mapping"
        )

    config_data = _expand_env_vars(config_data)
    logger.debug("Expanded environment variables in configuration")

    try:
        config = _build_config_from_dict(config_data)
        _validate_config(config)
    except InvalidConfigurationError as e:
        logger.error(f"Invalid configuration in '{config_path}': {e}")
        raise InvalidConfigurationError(
            f"Invalid configuration in '{config_path}': {e}"
        ) from e

    logger.info(f"Successfully loaded and validated configuration from {config_path}")
    return config


def _build_config_from_dict(config_data: Dict[str, Any]) -> StatsviewConfig:
    """
    Build StatsviewConfig from dictionary loaded from YAML.

    Args:
        config_data: Dictionary with configuration data

    Returns:
        StatsviewConfig: Configuration object

    Raises:
        InvalidConfigurationError: If a section has the wrong shape or type
    """
    server_data = config_data.get('server') or {}
    logging_data = config_data.get('logging') or {}

    if not isinstance(server_data, dict):
        raise InvalidConfigurationError("'server' section must be a mapping")
    if not isinstance(logging_data, dict):
        raise InvalidConfigurationError("'logging' section must be a mapping")

    default_server = ServerConfig()
    try:
        port = int(server_data.get('port', default_server.port))
    except (TypeError, ValueError) as e:
        raise InvalidConfigurationError(
            f"server port must be an integer, got {server_data.get('port')!r}"
        ) from e

    server = ServerConfig(
        host=str(server_data.get('host', default_server.host)),
        port=port,
        local_ip=str(server_data.get('local_ip') or ""),
        role=str(server_data.get('role', default_server.role)),
    )

    default_logging = LoggingConfig()
    logging = LoggingConfig(
        level=str(logging_data.get('level', default_logging.level)),
        file=str(logging_data.get('file') or ""),
        format=str(logging_data.get('format', default_logging.format)),
    )

    return StatsviewConfig(server=server, logging=logging)


def _validate_config(config: StatsviewConfig) -> None:
    """
    Validate configuration values.

    Args:
        config: Configuration to validate

    Raises:
        InvalidConfigurationError: If configuration is invalid
    """
    if not config.server.host:
        raise InvalidConfigurationError("server host cannot be empty")

    # Port 0 asks the OS for an ephemeral port
    if not 0 <= config.server.port <= 65535:
        raise InvalidConfigurationError(
            f"server port must be between 0 and 65535, got {config.server.port}"
        )

    if not config.server.role:
        raise InvalidConfigurationError("server role cannot be empty")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.logging.level.upper() not in valid_log_levels:
        raise InvalidConfigurationError(
            f"logging level must be one of {valid_log_levels}, "
            f"got '{config.logging.level}'"
        )

    valid_formats = ["json", "console"]
    if config.logging.format not in valid_formats:
        raise InvalidConfigurationError(
            f"logging format must be one of {valid_formats}, "
            f"got '{config.logging.format}'"
        )
