"""
Example usage of the SFTP fuzzy file loader.

This script demonstrates how to resolve a filename prefix on an SFTP
server and load the matching file as text or as a stream.

Prerequisites:
1. Create a .env file based on .env.example
2. Adjust config/sftp_loader.yaml for your server
3. Ensure the SFTP server is reachable

Usage:
    python example_usage.py employees_
"""

import logging
import sys

from dotenv import load_dotenv

from sftp_loader.config import ConfigError, load_config
from sftp_loader.loader import FileLoadError, FuzzyMatchSFTPFileLoader
from sftp_loader.sftp import SFTPConnectionManager, test_connection

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def example_text_load(loader: FuzzyMatchSFTPFileLoader, prefix: str):
    """Load the newest file matching the prefix as text."""
    logger.info("\n--- Text Load Example ---")

    try:
        result = loader.load_file_as_text(prefix)
        logger.info(f"Resolved '{prefix}' to '{result.filename}'")
        logger.info(f"First line: {result.content.splitlines()[:1]}")
    except FileLoadError as e:
        logger.error(f"Load failed ({e.reason.value}): {e}")


def example_stream_load(loader: FuzzyMatchSFTPFileLoader, prefix: str):
    """Open the newest file matching the prefix as a stream."""
    logger.info("\n--- Stream Load Example ---")

    try:
        result = loader.load_file_as_stream(prefix)
    except FileLoadError as e:
        logger.error(f"Load failed ({e.reason.value}): {e}")
        return

    with result.content as stream:
        head = stream.read(64)
    logger.info(f"Read {len(head)} bytes from '{result.filename}'")


def main():
    """Run all examples."""
    load_dotenv()
    prefix = sys.argv[1] if len(sys.argv) > 1 else "employees_"
    logger.info("=== SFTP Fuzzy File Loader - Example Usage ===\n")

    try:
        config = load_config()
    except ConfigError as e:
        logger.error(f"Cannot load configuration: {e}")
        return

    manager = SFTPConnectionManager(config.sftp, config.pool)
    loader = FuzzyMatchSFTPFileLoader(manager, config.loader)

    try:
        if not test_connection(manager):
            logger.error("Cannot proceed without SFTP connection")
            return

        example_text_load(loader, prefix)
        example_stream_load(loader, prefix)
    finally:
        logger.info("\n--- Cleanup ---")
        manager.close_all()
        logger.info("Connection pool closed")


if __name__ == "__main__":
    main()
