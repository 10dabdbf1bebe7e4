"""
Configuration module for the SFTP file loader.

This module provides Pydantic models and YAML loading utilities
for the SFTP connection, the connection pool and the loader itself.
"""

from sftp_loader.config.models import (
    APIConfig,
    AppConfig,
    LoaderConfig,
    PoolConfig,
    SFTPConfig,
)
from sftp_loader.config.loader import (
    ConfigError,
    load_config,
    load_config_from_dict,
)

__all__ = [
    # Models
    "APIConfig",
    "AppConfig",
    "LoaderConfig",
    "PoolConfig",
    "SFTPConfig",
    # Loader
    "ConfigError",
    "load_config",
    "load_config_from_dict",
]
