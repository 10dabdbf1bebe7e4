"""
API module for the file loader service.

This module provides:
- FastAPI routers for file loading and health checks
- Response schemas
"""

from sftp_loader.api.routes import (
    files_router,
    get_loader,
    health_router,
)
from sftp_loader.api.schemas import (
    FileContentResponse,
    HealthResponse,
    ResolveResponse,
)

__all__ = [
    # Routers
    "files_router",
    "health_router",
    "get_loader",
    # Schemas
    "FileContentResponse",
    "HealthResponse",
    "ResolveResponse",
]
