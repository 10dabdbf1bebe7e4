"""
Pydantic models for API responses.
"""

from pydantic import BaseModel, Field

from sftp_loader import __version__


class FileContentResponse(BaseModel):
    """Text content of a resolved file."""
    filename: str = Field(..., description="Remote filename the prefix resolved to")
    content: str = Field(..., description="Decoded file content")


class ResolveResponse(BaseModel):
    """Result of resolving a prefix without loading the file."""
    prefix: str
    filename: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    sftp: bool
    version: str = __version__
