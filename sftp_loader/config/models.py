"""
Pydantic models for loader configuration.

These models define the structure of the YAML configuration file:
SFTP connection settings, connection pool limits, the fuzzy
matching options of the file loader and the API key of the HTTP service.
"""

import codecs
import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def _read_secret(value: Optional[str], env_var: Optional[str]) -> Optional[str]:
    """Return `value` if set, else the content of environment variable `env_var`."""
    if value:
        return value
    if env_var:
        return os.getenv(env_var)
    return None


class SFTPConfig(BaseModel):
    """
    SFTP connection configuration.

    Attributes:
        host: SFTP server hostname
        port: SFTP server port (default: 22)
        username: SFTP username
        password: SFTP password (use password OR key_path, not both)
        password_env: Name of environment variable containing the password
        key_path: Path to SSH private key file
        remote_path: Remote directory to change into after login
                     (default: stay in the login directory)
    """
    host: str
    port: int = 22
    username: str
    password: Optional[str] = None
    password_env: Optional[str] = None
    key_path: Optional[str] = None
    remote_path: Optional[str] = None

    def resolve_password(self) -> Optional[str]:
        """
        Get the password, reading it from the environment if configured.

        An explicit `password` wins over `password_env`.
        """
        return _read_secret(self.password, self.password_env)


class PoolConfig(BaseModel):
    """
    Connection pool limits.

    Streams returned by the loader keep reading from their connection after
    it went back to the pool, so every released connection must fit in the
    idle list: `max_idle` may not be lower than `max_connections`.

    Attributes:
        max_connections: Maximum number of connections handed out at once
        max_idle: Maximum number of idle connections kept open for reuse
    """
    max_connections: int = Field(default=4, ge=1)
    max_idle: int = Field(default=4, ge=1)

    @model_validator(mode="after")
    def check_idle_limit(self):
        if self.max_idle < self.max_connections:
            raise ValueError(
                f"max_idle ({self.max_idle}) must be at least "
                f"max_connections ({self.max_connections})"
            )
        return self


class LoaderConfig(BaseModel):
    """
    Fuzzy file loader options.

    Attributes:
        case_insensitive_match: Compare prefix and filenames ignoring case (default: True)
        encoding: Encoding used by text loads (default: "utf-8")
        remote_dir: Directory listed when resolving a prefix (default: ".")
    """
    case_insensitive_match: bool = True
    encoding: str = "utf-8"
    remote_dir: str = "."

    @field_validator("encoding")
    @classmethod
    def check_encoding(cls, v):
        """Reject encodings Python does not know about."""
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {v}") from e
        return v


class APIConfig(BaseModel):
    """
    HTTP API settings.

    Attributes:
        api_key: Key expected in the X-API-Key header
        api_key_env: Name of environment variable containing the key
                     (default: "API_KEY")
    """
    api_key: Optional[str] = None
    api_key_env: Optional[str] = "API_KEY"

    def resolve_api_key(self) -> Optional[str]:
        """An explicit `api_key` wins over `api_key_env`."""
        return _read_secret(self.api_key, self.api_key_env)


class AppConfig(BaseModel):
    """
    Complete application configuration.

    Example YAML:
        ```yaml
        sftp:
          host: sftp.example.com
          username: hr_sync
          password_env: HR_SFTP_PASSWORD
          remote_path: /exports/hr
        pool:
          max_connections: 4
          max_idle: 4
        loader:
          case_insensitive_match: true
        api:
          api_key_env: HR_LOADER_API_KEY
        ```
    """
    sftp: SFTPConfig
    pool: PoolConfig = Field(default_factory=PoolConfig)
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    api: APIConfig = Field(default_factory=APIConfig)
