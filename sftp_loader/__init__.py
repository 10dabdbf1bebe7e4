"""
Fuzzy-matching SFTP file loader.

Resolves a filename prefix against a remote SFTP directory and loads the
matching file as text or as a byte stream.
"""

__version__ = "1.0.0"
