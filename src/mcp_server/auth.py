"""Client authentication for the HTTP transport.

The stdio transport is trusted by construction: the MCP host launched the
process. Over HTTP an optional static API key guards every endpoint except
/health.
"""

import secrets
from typing import Optional

from fastapi import HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shared.logging import get_logger

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)


class APIKeyAuth:
    """
    FastAPI dependency enforcing a bearer API key.

    When no key is configured, every request is accepted.
    """

    def __init__(self, api_key: Optional[str] = None) -> None:
        self.api_key = api_key

    @property
    def required(self) -> bool:
        return bool(self.api_key)

    def verify(self, credentials: Optional[HTTPAuthorizationCredentials]) -> None:
        """
        Check presented credentials.

        Raises:
            HTTPException: 401 if the key is missing or does not match
        """
        if not self.required:
            return

        if credentials is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required",
                headers={"WWW-Authenticate": "Bearer"},
            )

        if not secrets.compare_digest(credentials.credentials, self.api_key):
            logger.warning("Rejected HTTP client with invalid API key")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication token",
                headers={"WWW-Authenticate": "Bearer"},
            )
