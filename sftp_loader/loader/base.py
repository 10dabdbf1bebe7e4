"""
File loader interface and result types.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Generic, TypeVar

T = TypeVar("T")


class LoadFailureReason(str, Enum):
    """
    Why a load failed.

    NO_MATCH covers both an empty candidate list and a failed directory
    listing. TRANSPORT covers failures to connect, open or download.
    """
    NO_MATCH = "no_match"
    TRANSPORT = "transport"
    DECODING = "decoding"


class FileLoadError(Exception):
    """
    Raised when a file cannot be resolved or loaded.

    Attributes:
        prefix: The prefix the caller asked for
        reason: LoadFailureReason describing the failure
    """

    def __init__(self, message: str, prefix: str, reason: LoadFailureReason):
        super().__init__(message)
        self.prefix = prefix
        self.reason = reason


@dataclass(frozen=True)
class LoadContent(Generic[T]):
    """
    Loaded payload together with the name it was resolved to.

    Attributes:
        content: Decoded text or an open binary stream
        filename: Concrete remote filename the prefix resolved to
    """
    content: T
    filename: str


class FileLoader(ABC):
    """Loads a remote file identified by an approximate name."""

    @abstractmethod
    def load_file_as_stream(self, prefix: str) -> LoadContent[BinaryIO]:
        """Open the matching file as a binary stream owned by the caller."""

    @abstractmethod
    def load_file_as_text(self, prefix: str) -> LoadContent[str]:
        """Read the matching file fully and decode it."""
