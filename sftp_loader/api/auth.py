"""
API key check for the file routes.

The expected key comes from the `api` section of the configuration
(stored on `app.state.api_config` at startup). Without a configured
section the key is read from the API_KEY environment variable.
"""

import secrets
from typing import Optional

from fastapi import HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from sftp_loader.config.models import APIConfig

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def get_api_key(request: Request) -> Optional[str]:
    """Get the key the server expects."""
    api_config = getattr(request.app.state, "api_config", None) or APIConfig()
    return api_config.resolve_api_key()


def require_api_key(request: Request, api_key: Optional[str] = Security(api_key_header)) -> str:
    """
    Dependency that requires a valid X-API-Key header.

    Raises:
        HTTPException 500: If no key is configured on the server
        HTTPException 401: If no API key provided
        HTTPException 403: If API key is invalid
    """
    expected_key = get_api_key(request)
    if not expected_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API key not configured on server",
        )

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key. Provide X-API-Key header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if not secrets.compare_digest(api_key.encode(), expected_key.encode()):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid API key")

    return api_key
