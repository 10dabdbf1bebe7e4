"""
SFTP module for reading files from remote servers.

This module provides:
- SFTPClient: paramiko-backed connection with listing and file access
- SFTPConnectionManager: pool handing out connections via acquire/release
- test_connection: Quick connection test utility
"""

from sftp_loader.sftp.client import (
    SFTPClient,
    SFTPError,
)
from sftp_loader.sftp.pool import (
    PoolExhaustedError,
    SFTPConnectionManager,
    test_connection,
)

__all__ = [
    "SFTPClient",
    "SFTPError",
    "PoolExhaustedError",
    "SFTPConnectionManager",
    "test_connection",
]
