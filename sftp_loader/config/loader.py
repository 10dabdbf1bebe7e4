"""
YAML configuration loader for the SFTP file loader.

This module provides functions to load and validate the application
configuration file.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from sftp_loader.config.models import AppConfig

logger = logging.getLogger(__name__)

# Default config file relative to the working directory
DEFAULT_CONFIG_PATH = "config/sftp_loader.yaml"
CONFIG_PATH_ENV = "SFTP_LOADER_CONFIG"


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""
    pass


def get_config_path(config_path: Optional[str] = None) -> Path:
    """
    Get the path to the configuration file.

    Args:
        config_path: Optional explicit path to the configuration file

    Returns:
        Path to the configuration file

    Raises:
        ConfigError: If config file doesn't exist
    """
    if config_path is None:
        # Use environment variable or default
        config_path = os.getenv(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH)

    path = Path(config_path)

    if not path.exists():
        raise ConfigError(
            f"Configuration file not found: {path}. "
            f"Create it or point {CONFIG_PATH_ENV} at an existing file."
        )

    return path


def load_yaml_file(file_path: Path) -> dict:
    """
    Load and parse a YAML file.

    Args:
        file_path: Path to YAML file

    Returns:
        Parsed YAML content as dictionary

    Raises:
        ConfigError: If file cannot be read or parsed
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML in {file_path}: {e}") from e
    except IOError as e:
        raise ConfigError(f"Failed to read configuration file {file_path}: {e}") from e

    if content is None:
        raise ConfigError(f"Empty configuration file: {file_path}")

    if not isinstance(content, dict):
        raise ConfigError(
            f"Invalid configuration format in {file_path}. "
            "Expected a YAML mapping (dictionary)."
        )

    return content


def _format_validation_error(e: ValidationError) -> str:
    error_messages = []
    for error in e.errors():
        location = " -> ".join(str(loc) for loc in error["loc"])
        error_messages.append(f"  {location}: {error['msg']}")
    return "\n".join(error_messages)


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load and validate the application configuration.

    Environment variables (`SFTP_LOADER_CONFIG`, `password_env`) are read
    as they are; loading a `.env` file is up to the entry point.

    Args:
        config_path: Optional explicit path to the configuration file

    Returns:
        Validated AppConfig object

    Raises:
        ConfigError: If file not found, invalid YAML, or validation fails
    """
    path = get_config_path(config_path)
    logger.info(f"Loading configuration from: {path}")

    raw_config = load_yaml_file(path)

    try:
        config = AppConfig(**raw_config)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid configuration in {path}:\n" + _format_validation_error(e)
        ) from e

    logger.info(
        f"Loaded configuration for {config.sftp.username}@{config.sftp.host}:{config.sftp.port}"
    )
    return config


def load_config_from_dict(config_dict: dict) -> AppConfig:
    """
    Create an AppConfig from a dictionary.

    Useful for testing or when configuration is provided
    programmatically.

    Args:
        config_dict: Dictionary with configuration values

    Returns:
        Validated AppConfig object

    Raises:
        ConfigError: If validation fails
    """
    try:
        return AppConfig(**config_dict)
    except ValidationError as e:
        raise ConfigError(
            "Invalid configuration:\n" + _format_validation_error(e)
        ) from e
