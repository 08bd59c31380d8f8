"""User account endpoints: register, login, logout and profile."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from blog_backend.auth import require_user
from blog_backend.dependencies import get_auth_service
from blog_backend.services import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class CredentialsRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=256)


@router.post("/register", status_code=201)
async def register(
    request: CredentialsRequest, service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Create a plain user account. Returns a token and the new user."""
    return await service.register(request.username, request.password)


@router.post("/login")
async def login(
    request: CredentialsRequest, service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    return await service.login(request.username, request.password)


@router.post("/logout")
async def logout(
    claims: Dict[str, Any] = Depends(require_user),
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, str]:
    """Revoke the presented token and drop the user's session."""
    return await service.logout(claims)


@router.get("/profile")
async def profile(
    claims: Dict[str, Any] = Depends(require_user),
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    return await service.profile(claims)
