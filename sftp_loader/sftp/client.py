"""
SFTP client used as the pooled connection of the file loader.

This module provides a paramiko-backed client that:
- Connects with password or SSH key authentication
- Changes into the configured remote directory
- Lists directory entries
- Opens remote files as streams or copies them into buffers
"""

import logging
import os
from typing import BinaryIO, List, Optional

import paramiko

from sftp_loader.config.models import SFTPConfig

logger = logging.getLogger(__name__)


class SFTPError(Exception):
    """Raised when SFTP operations fail."""
    pass


class SFTPClient:
    """
    SFTP client for reading files from a remote server.

    Supports both password and SSH key authentication.
    Use as a context manager to ensure the connection is closed, or hand
    it to an SFTPConnectionManager for reuse.

    Example:
        ```python
        config = SFTPConfig(
            host="sftp.example.com",
            username="user",
            key_path="~/.ssh/id_rsa",
            remote_path="/exports/",
        )

        with SFTPClient(config) as sftp:
            names = sftp.list_entries()
            with sftp.open_file(names[0]) as f:
                data = f.read()
        ```
    """

    def __init__(self, config: SFTPConfig):
        """
        Initialize SFTP client with configuration.

        Args:
            config: SFTPConfig with connection details
        """
        self.config = config
        self._transport: Optional[paramiko.Transport] = None
        self._sftp: Optional[paramiko.SFTPClient] = None

    def __enter__(self) -> "SFTPClient":
        """Connect to SFTP server."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect."""
        self.disconnect()

    def connect(self) -> None:
        """
        Establish connection to SFTP server.

        Raises:
            SFTPError: If connection fails
        """
        try:
            logger.info(f"Connecting to SFTP: {self.config.host}:{self.config.port}")

            self._transport = paramiko.Transport((self.config.host, self.config.port))

            password = self.config.resolve_password()
            if self.config.key_path:
                key_path = os.path.expanduser(self.config.key_path)
                if not os.path.exists(key_path):
                    raise SFTPError(f"SSH key file not found: {key_path}")

                pkey = self._load_private_key(key_path)
                self._transport.connect(username=self.config.username, pkey=pkey)
                logger.debug(f"Authenticated with SSH key: {key_path}")

            elif password:
                self._transport.connect(
                    username=self.config.username,
                    password=password
                )
                logger.debug("Authenticated with password")

            else:
                raise SFTPError(
                    "No authentication method provided. "
                    "Set 'password', 'password_env' or 'key_path' in SFTP config."
                )

            self._sftp = paramiko.SFTPClient.from_transport(self._transport)

            if self.config.remote_path:
                self._sftp.chdir(self.config.remote_path)

            logger.info(f"Connected to SFTP server: {self.config.host}")

        except SFTPError:
            self.disconnect()
            raise
        except paramiko.SSHException as e:
            self.disconnect()
            raise SFTPError(f"SSH connection failed: {e}") from e
        except Exception as e:
            self.disconnect()
            raise SFTPError(f"SFTP connection failed: {e}") from e

    def _load_private_key(self, key_path: str) -> paramiko.PKey:
        """
        Load private key from file, trying different key types.

        Args:
            key_path: Path to private key file

        Returns:
            Loaded private key

        Raises:
            SFTPError: If key cannot be loaded
        """
        key_classes = [
            paramiko.RSAKey,
            paramiko.Ed25519Key,
            paramiko.ECDSAKey,
        ]
        # DSS support was removed in paramiko 4
        if hasattr(paramiko, "DSSKey"):
            key_classes.append(paramiko.DSSKey)

        last_error = None
        for key_class in key_classes:
            try:
                return key_class.from_private_key_file(key_path)
            except paramiko.SSHException as e:
                last_error = e
                continue

        raise SFTPError(f"Could not load SSH key {key_path}: {last_error}")

    def disconnect(self) -> None:
        """Close SFTP connection."""
        if self._sftp:
            try:
                self._sftp.close()
            except Exception as e:
                logger.warning(f"Error closing SFTP client: {e}")
            self._sftp = None

        if self._transport:
            try:
                self._transport.close()
            except Exception as e:
                logger.warning(f"Error closing transport: {e}")
            self._transport = None

        logger.debug("SFTP connection closed")

    @property
    def is_connected(self) -> bool:
        """Check if the session is open and the transport still alive."""
        return (
            self._sftp is not None
            and self._transport is not None
            and self._transport.is_active()
        )

    def _ensure_connected(self) -> None:
        """Raise error if not connected."""
        if not self._sftp:
            raise SFTPError("Not connected to SFTP server. Call connect() first.")

    def list_entries(self, path: str = ".") -> List[str]:
        """
        List entry names in a remote directory.

        Args:
            path: Remote directory, relative to the current directory

        Returns:
            Entry names in server order

        Raises:
            SFTPError: If listing fails
        """
        self._ensure_connected()

        try:
            logger.debug(f"Listing entries in {path}")
            return [attr.filename for attr in self._sftp.listdir_attr(path)]
        except (IOError, paramiko.SSHException) as e:
            raise SFTPError(f"Failed to list entries in {path}: {e}") from e

    def open_file(self, filename: str) -> BinaryIO:
        """
        Open a remote file for binary reading.

        The caller owns the returned file object and must close it.

        Raises:
            SFTPError: If the file cannot be opened
        """
        self._ensure_connected()

        try:
            logger.debug(f"Opening remote file: {filename}")
            return self._sftp.open(filename, "rb")
        except (IOError, paramiko.SSHException) as e:
            raise SFTPError(f"Failed to open {filename}: {e}") from e

    def download_to(self, filename: str, buffer: BinaryIO) -> int:
        """
        Copy a remote file into a writable binary buffer.

        Args:
            filename: Remote file name
            buffer: File-like object receiving the bytes

        Returns:
            Number of bytes copied

        Raises:
            SFTPError: If the download fails
        """
        self._ensure_connected()

        try:
            logger.debug(f"Downloading remote file: {filename}")
            return self._sftp.getfo(filename, buffer)
        except (IOError, paramiko.SSHException) as e:
            raise SFTPError(f"Failed to download {filename}: {e}") from e
