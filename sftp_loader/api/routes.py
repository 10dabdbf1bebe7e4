"""
FastAPI routes for the file loader API.

Endpoints:
- Files: resolve a prefix, load text content, or stream raw bytes
- Health: SFTP connectivity check

The routes are plain functions because the SFTP calls block; FastAPI
runs them in its thread pool.
"""

import logging
from typing import BinaryIO, Iterator
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from sftp_loader.api.auth import require_api_key
from sftp_loader.api.schemas import FileContentResponse, HealthResponse, ResolveResponse
from sftp_loader.loader import FileLoadError, FuzzyMatchSFTPFileLoader, LoadFailureReason
from sftp_loader.sftp import pool

logger = logging.getLogger(__name__)

STREAM_CHUNK_SIZE = 32768

files_router = APIRouter(
    prefix="/files",
    tags=["files"],
    dependencies=[Depends(require_api_key)],
)
health_router = APIRouter(tags=["health"])  # Public, no auth

_STATUS_BY_REASON = {
    LoadFailureReason.NO_MATCH: 404,
    LoadFailureReason.TRANSPORT: 502,
    LoadFailureReason.DECODING: 422,
}


def get_loader(request: Request) -> FuzzyMatchSFTPFileLoader:
    """Dependency returning the loader created at startup."""
    loader = getattr(request.app.state, "loader", None)
    if loader is None:
        raise HTTPException(status_code=503, detail="File loader not initialized")
    return loader


def _to_http_error(e: FileLoadError) -> HTTPException:
    return HTTPException(status_code=_STATUS_BY_REASON.get(e.reason, 500), detail=str(e))


def _iter_stream(stream: BinaryIO, chunk_size: int = STREAM_CHUNK_SIZE) -> Iterator[bytes]:
    try:
        while True:
            chunk = stream.read(chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        stream.close()


# =============================================================================
# File Routes
# =============================================================================

@files_router.get("/{prefix}/resolve", response_model=ResolveResponse)
def resolve_file_endpoint(prefix: str, loader: FuzzyMatchSFTPFileLoader = Depends(get_loader)):
    """Resolve a prefix to the remote filename that would be loaded."""
    try:
        filename = loader.resolve_file_name(prefix)
    except FileLoadError as e:
        raise _to_http_error(e)
    return ResolveResponse(prefix=prefix, filename=filename)


@files_router.get("/{prefix}/raw")
def download_file_endpoint(prefix: str, loader: FuzzyMatchSFTPFileLoader = Depends(get_loader)):
    """Stream the raw bytes of the file matching a prefix."""
    try:
        result = loader.load_file_as_stream(prefix)
    except FileLoadError as e:
        raise _to_http_error(e)

    quoted = quote(result.filename)
    return StreamingResponse(
        _iter_stream(result.content),
        media_type="application/octet-stream",
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quoted}",
            "X-Resolved-Filename": quoted,
        },
    )


@files_router.get("/{prefix}", response_model=FileContentResponse)
def get_file_content_endpoint(prefix: str, loader: FuzzyMatchSFTPFileLoader = Depends(get_loader)):
    """Load the file matching a prefix as text."""
    try:
        result = loader.load_file_as_text(prefix)
    except FileLoadError as e:
        raise _to_http_error(e)
    return FileContentResponse(filename=result.filename, content=result.content)


# =============================================================================
# Health Routes
# =============================================================================

@health_router.get("/health", response_model=HealthResponse)
def health_check(request: Request):
    """Check SFTP connectivity."""
    manager = getattr(request.app.state, "connection_manager", None)
    sftp_ok = manager is not None and pool.test_connection(manager)

    return HealthResponse(
        status="healthy" if sftp_ok else "unhealthy",
        sftp=sftp_ok,
    )
