"""
FastAPI application for the SFTP file loader service.

This is the main entry point for the API server.

Run with:
    uvicorn sftp_loader.main:app --reload

Or for production:
    uvicorn sftp_loader.main:app --host 0.0.0.0 --port 8000
"""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from sftp_loader import __version__
from sftp_loader.api.routes import files_router, health_router
from sftp_loader.config import load_config
from sftp_loader.loader import FuzzyMatchSFTPFileLoader
from sftp_loader.sftp import SFTPConnectionManager

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - On startup: Load configuration, create connection manager and loader
    - On shutdown: Close pooled SFTP connections
    """
    logger.info("Starting SFTP File Loader API...")

    try:
        config = load_config()
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise

    manager = SFTPConnectionManager(config.sftp, config.pool)
    app.state.connection_manager = manager
    app.state.loader = FuzzyMatchSFTPFileLoader(manager, config.loader)
    app.state.api_config = config.api

    yield

    logger.info("Shutting down SFTP File Loader API...")
    manager.close_all()
    logger.info("SFTP connections closed")


app = FastAPI(
    title="SFTP File Loader API",
    description="Resolve files on an SFTP server by name prefix and load their contents",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(files_router)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "SFTP File Loader API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "sftp_loader.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "false").lower() == "true",
    )
