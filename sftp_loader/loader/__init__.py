"""
File loaders.

This module provides:
- FileLoader: interface for loading a file by approximate name
- FuzzyMatchSFTPFileLoader: prefix-matching loader over pooled SFTP connections
- LoadContent / FileLoadError / LoadFailureReason: results and failures
"""

from sftp_loader.loader.base import (
    FileLoader,
    FileLoadError,
    LoadContent,
    LoadFailureReason,
)
from sftp_loader.loader.fuzzy import (
    FuzzyMatchSFTPFileLoader,
    match_prefix,
    pick_nearest,
)

__all__ = [
    "FileLoader",
    "FileLoadError",
    "LoadContent",
    "LoadFailureReason",
    "FuzzyMatchSFTPFileLoader",
    "match_prefix",
    "pick_nearest",
]
