"""
SFTP connection management with connection pooling.

Connections are handed out with acquire() and given back with release().
Idle connections stay open for reuse up to `max_idle`; anything beyond
that is closed when released.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Generator, List, Optional

from sftp_loader.config.models import PoolConfig, SFTPConfig
from sftp_loader.sftp.client import SFTPClient, SFTPError

logger = logging.getLogger(__name__)


class PoolExhaustedError(SFTPError):
    """Raised when connection pool has no available connections."""
    pass


class SFTPConnectionManager:
    """
    Thread-safe pool of SFTP connections.

    Usage:
        manager = SFTPConnectionManager(sftp_config, PoolConfig(max_connections=2))

        client = manager.acquire()
        try:
            names = client.list_entries()
        finally:
            manager.release(client)

        # or
        with manager.connection() as client:
            names = client.list_entries()
    """

    def __init__(
        self,
        sftp_config: SFTPConfig,
        pool_config: Optional[PoolConfig] = None,
        client_factory: Optional[Callable[[SFTPConfig], SFTPClient]] = None,
    ):
        """
        Args:
            sftp_config: Connection details for new clients
            pool_config: Pool limits (defaults to PoolConfig())
            client_factory: Builds an unconnected client from the config
                            (defaults to SFTPClient)
        """
        self.sftp_config = sftp_config
        self.pool_config = pool_config or PoolConfig()
        self._client_factory = client_factory or SFTPClient
        self._idle: List[SFTPClient] = []
        self._in_use = 0
        self._closed = False
        self._lock = threading.Lock()

    @property
    def idle_count(self) -> int:
        """Number of open connections waiting for reuse."""
        with self._lock:
            return len(self._idle)

    @property
    def in_use_count(self) -> int:
        """Number of connections currently handed out."""
        with self._lock:
            return self._in_use

    def acquire(self) -> SFTPClient:
        """
        Get a connected client, reusing an idle one when possible.

        Raises:
            PoolExhaustedError: If `max_connections` clients are already in use
            SFTPError: If the manager is closed or a new connection fails
        """
        stale: List[SFTPClient] = []
        client = None

        with self._lock:
            if self._closed:
                raise SFTPError("Connection manager is closed")

            while self._idle:
                candidate = self._idle.pop()
                if candidate.is_connected:
                    client = candidate
                    break
                stale.append(candidate)

            if client is None and self._in_use >= self.pool_config.max_connections:
                self._discard(stale)
                raise PoolExhaustedError(
                    f"Connection pool exhausted. {self._in_use} of "
                    f"{self.pool_config.max_connections} connections in use."
                )
            self._in_use += 1

        self._discard(stale)

        if client is not None:
            logger.debug("Reusing idle SFTP connection")
            return client

        try:
            client = self._client_factory(self.sftp_config)
            client.connect()
        except Exception:
            with self._lock:
                self._in_use -= 1
            raise

        logger.debug("Opened new SFTP connection")
        return client

    def release(self, client: Optional[SFTPClient]) -> None:
        """
        Give a client back to the pool.

        Passing None is a no-op, so callers can release unconditionally.
        """
        if client is None:
            return

        with self._lock:
            self._in_use = max(self._in_use - 1, 0)
            keep = (
                not self._closed
                and client.is_connected
                and len(self._idle) < self.pool_config.max_idle
            )
            if keep:
                self._idle.append(client)

        if keep:
            logger.debug("SFTP connection returned to pool")
        else:
            client.disconnect()
            logger.debug("SFTP connection closed on release")

    @contextmanager
    def connection(self) -> Generator[SFTPClient, None, None]:
        """
        Context manager for obtaining a connection from the pool.

        Automatically returns the connection when the context exits.
        """
        client = self.acquire()
        try:
            yield client
        finally:
            self.release(client)

    def close_all(self) -> None:
        """
        Close idle connections and refuse further acquires.

        Connections still in use are closed when they are released.
        """
        with self._lock:
            self._closed = True
            idle, self._idle = self._idle, []

        logger.info(f"Closing SFTP connection pool ({len(idle)} idle connections)")
        self._discard(idle)

    @staticmethod
    def _discard(clients: List[SFTPClient]) -> None:
        for client in clients:
            client.disconnect()


def test_connection(manager: SFTPConnectionManager) -> bool:
    """
    Test SFTP connectivity by listing the current directory.

    Args:
        manager: Connection manager to borrow a connection from

    Returns:
        True if connection successful, False otherwise
    """
    try:
        with manager.connection() as client:
            entries = client.list_entries()
            logger.info(f"Connection test successful. Found {len(entries)} entries.")
            return True
    except SFTPError as e:
        logger.error(f"Connection test failed: {e}")
        return False
