"""Request authentication.

Reads are public. Routes that create, update or delete content depend on
``require_api_key``, which checks the X-API-Key header against API_KEYS.
Account routes depend on ``require_user``, which resolves an
``Authorization: Bearer`` token to its claims.
"""

import logging
import os
import secrets
from typing import Any, Dict, List, Optional

from fastapi import Depends, HTTPException, Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from blog_backend.dependencies import get_auth_service
from blog_backend.services import AuthService

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration
# ============================================================================

def get_valid_api_keys() -> List[str]:
    """
    Get valid API keys from environment variable.

    Returns:
        List of valid API keys. Keys are read from the API_KEYS environment
        variable as a comma-separated list.
    """
    api_keys_env = os.getenv("API_KEYS", "")
    return [key.strip() for key in api_keys_env.split(",") if key.strip()]


# ============================================================================
# Security Utilities
# ============================================================================

def constant_time_compare(val1: str, val2: str) -> bool:
    """Compare two strings in constant time to prevent timing attacks."""
    return secrets.compare_digest(val1.encode(), val2.encode())


def validate_api_key(api_key: str) -> bool:
    """
    Validate an API key against the configured keys.

    With no keys configured every request is rejected.
    """
    valid_keys = get_valid_api_keys()
    if not valid_keys:
        return False

    # Check every key so timing does not reveal which one matched
    matched = False
    for valid_key in valid_keys:
        if constant_time_compare(api_key, valid_key):
            matched = True
    return matched


# ============================================================================
# Authentication Dependencies
# ============================================================================

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def require_api_key(api_key: Optional[str] = Security(api_key_header)) -> str:
    """
    FastAPI dependency to validate the X-API-Key header.

    Raises:
        HTTPException: 401 if the key is missing or invalid
    """
    if not api_key:
        raise HTTPException(
            status_code=401,
            detail="Missing API key. Please provide X-API-Key header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if not validate_api_key(api_key):
        logger.warning("Rejected request with invalid API key")
        raise HTTPException(
            status_code=401,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return api_key


bearer_scheme = HTTPBearer(auto_error=False)


async def require_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """
    FastAPI dependency resolving the bearer token to its claims.

    Raises:
        AuthenticationError: 401 if the token is missing, invalid or revoked
    """
    token = credentials.credentials if credentials else None
    return await service.authenticate(token)
