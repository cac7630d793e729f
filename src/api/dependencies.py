"""FastAPI dependencies for authentication."""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.services.auth_service import AuthService

# auto_error is off: each operation decides how a missing token is reported
bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service() -> AuthService:
    """Build an AuthService bound to the process-wide session store."""
    return AuthService()


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """Extract the raw token from an ``Authorization: Bearer`` header.

    Returns:
        The token string, or None if the header is absent or not a Bearer header
    """
    if credentials is None:
        return None
    return credentials.credentials
