"""
Fuzzy filename matching loader for SFTP servers.

The loader resolves a filename prefix against a remote directory listing:

1. List the entries of the configured remote directory
2. Keep entries whose name starts with the trimmed prefix
   (case-insensitive unless configured otherwise)
3. If several names match, pick the lexicographically greatest one,
   which for date-stamped exports is the most recent file

Every public operation borrows one connection from the connection manager
and gives it back before returning, whatever the outcome.
"""

import io
import logging
from typing import BinaryIO, Iterable, List, Optional, Protocol

from sftp_loader.config.models import LoaderConfig
from sftp_loader.loader.base import (
    FileLoader,
    FileLoadError,
    LoadContent,
    LoadFailureReason,
)
from sftp_loader.sftp.client import SFTPClient, SFTPError

logger = logging.getLogger(__name__)


class ConnectionManager(Protocol):
    """Anything that hands out SFTP connections."""

    def acquire(self) -> SFTPClient: ...

    def release(self, client: Optional[SFTPClient]) -> None: ...


def match_prefix(names: Iterable[str], prefix: str, case_insensitive: bool = True) -> List[str]:
    """
    Select the names starting with `prefix`, keeping their order.

    The prefix is trimmed before comparison. None entries are skipped.
    """
    wanted = prefix.strip()
    if case_insensitive:
        wanted = wanted.lower()

    candidates = []
    for name in names:
        if name is None:
            continue
        compared = name.lower() if case_insensitive else name
        if compared.startswith(wanted):
            candidates.append(name)
    return candidates


def pick_nearest(candidates: List[str]) -> Optional[str]:
    """
    Pick one filename out of the candidates.

    Returns None for an empty list; otherwise the lexicographically
    greatest name.
    """
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]
    return sorted(candidates, reverse=True)[0]


class FuzzyMatchSFTPFileLoader(FileLoader):
    """
    Loads the remote file whose name best matches a prefix.

    Example:
        ```python
        manager = SFTPConnectionManager(config.sftp, config.pool)
        loader = FuzzyMatchSFTPFileLoader(manager, config.loader)

        result = loader.load_file_as_text("employees_")
        print(result.filename)  # e.g. employees_20240102.csv
        ```
    """

    def __init__(self, connection_manager: ConnectionManager, config: Optional[LoaderConfig] = None):
        """
        Args:
            connection_manager: Source of SFTP connections (acquire/release)
            config: Matching options (defaults to LoaderConfig())

        Raises:
            ValueError: If connection_manager is None
        """
        if connection_manager is None:
            raise ValueError("connection_manager is required")
        self.connection_manager = connection_manager
        self.config = config or LoaderConfig()

    @property
    def case_insensitive_match(self) -> bool:
        return self.config.case_insensitive_match

    def load_file_as_stream(self, prefix: str) -> LoadContent[BinaryIO]:
        """
        Open the file matching `prefix` as a binary stream.

        The stream is read after its connection went back to the manager,
        so it is valid only while that connection stays open.

        Raises:
            FileLoadError: If nothing matches or the transport fails
        """
        _check_prefix(prefix)
        client = self._acquire(prefix)
        try:
            filename = self._require_file_name(client, prefix)
            stream = client.open_file(filename)
            logger.info(f"Opened stream for '{filename}' (prefix '{prefix}')")
            return LoadContent(content=stream, filename=filename)
        except SFTPError as e:
            logger.error(f"Failed to load file {prefix} from sftp server: {e}", exc_info=True)
            raise FileLoadError(
                f"{prefix} load failed", prefix, LoadFailureReason.TRANSPORT
            ) from e
        finally:
            self.connection_manager.release(client)

    def load_file_as_text(self, prefix: str) -> LoadContent[str]:
        """
        Read the file matching `prefix` into memory and decode it.

        Raises:
            FileLoadError: If nothing matches, the transport fails or the
                           content cannot be decoded
        """
        _check_prefix(prefix)
        client = self._acquire(prefix)
        buffer = io.BytesIO()
        try:
            filename = self._require_file_name(client, prefix)
            size = client.download_to(filename, buffer)
            content = buffer.getvalue().decode(self.config.encoding)
            logger.info(f"Loaded '{filename}' ({size} bytes, prefix '{prefix}')")
            return LoadContent(content=content, filename=filename)
        except SFTPError as e:
            logger.error(f"Failed to load file {prefix} from sftp server: {e}", exc_info=True)
            raise FileLoadError(
                f"{prefix} load failed", prefix, LoadFailureReason.TRANSPORT
            ) from e
        except UnicodeDecodeError as e:
            logger.error(
                f"Failed to decode file {prefix} as {self.config.encoding}: {e}", exc_info=True
            )
            raise FileLoadError(
                f"{prefix} load failed", prefix, LoadFailureReason.DECODING
            ) from e
        finally:
            try:
                self.connection_manager.release(client)
            finally:
                buffer.close()

    def resolve_file_name(self, prefix: str) -> str:
        """
        Resolve `prefix` to a concrete remote filename without loading it.

        Raises:
            FileLoadError: If nothing matches or no connection is available
        """
        _check_prefix(prefix)
        client = self._acquire(prefix)
        try:
            return self._require_file_name(client, prefix)
        finally:
            self.connection_manager.release(client)

    def compute_file_name(self, client: SFTPClient, prefix: str) -> Optional[str]:
        """
        Compute the remote filename to load for `prefix`.

        A failed listing is logged and treated like an empty directory.

        Args:
            client: Connected SFTP client
            prefix: Approximate filename

        Returns:
            The matching filename, or None if nothing matches
        """
        try:
            names = client.list_entries(self.config.remote_dir)
        except SFTPError as e:
            logger.error(f"Failed to list {self.config.remote_dir}: {e}", exc_info=True)
            names = []

        candidates = match_prefix(names, prefix, self.config.case_insensitive_match)
        if len(candidates) > 1:
            logger.debug(f"{len(candidates)} files match '{prefix}': {candidates}")
        return pick_nearest(candidates)

    def _acquire(self, prefix: str) -> SFTPClient:
        try:
            return self.connection_manager.acquire()
        except SFTPError as e:
            logger.error(f"No sftp connection available to load {prefix}: {e}", exc_info=True)
            raise FileLoadError(
                f"{prefix} load failed", prefix, LoadFailureReason.TRANSPORT
            ) from e

    def _require_file_name(self, client: SFTPClient, prefix: str) -> str:
        filename = self.compute_file_name(client, prefix)
        if filename is None:
            logger.warning(f"No file name starts with '{prefix}'")
            raise FileLoadError(
                f"No file name starts with {prefix!r}",
                prefix,
                LoadFailureReason.NO_MATCH,
            )
        return filename


def _check_prefix(prefix: str) -> None:
    if prefix is None:
        raise ValueError("prefix must not be None")
