"""User accounts: registration, login, logout and profile."""

import logging
from typing import Any, Dict, Optional

from passlib.context import CryptContext

from blog_backend.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from blog_backend.services.session_service import SessionService

logger = logging.getLogger(__name__)

ROLES = ("user", "admin")

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": user["id"], "username": user["username"], "role": user["role"]}


class AuthService:
    """Account operations over a UserRepository and a SessionService.

    Without a SessionService only create_user() works (the CLI uses it that way).
    """

    def __init__(self, repository, sessions: Optional[SessionService] = None):
        self.repository = repository
        self.sessions = sessions

    async def register(self, username: str, password: str) -> Dict[str, Any]:
        """
        Create a plain user account and log it in.

        Returns:
            ``{"token": ..., "user": {"id", "username", "role"}}``
        """
        user = await self.create_user(username, password)
        return await self._start_session(user)

    async def create_user(self, username: str, password: str, role: str = "user") -> Dict[str, Any]:
        """
        Store a new account with a hashed password.

        Raises:
            ValidationError: If username or password is empty, or the role is unknown
            ConflictError: If the username is taken
        """
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("Username and password are required")
        if role not in ROLES:
            raise ValidationError(f"Unknown role: {role!r}")

        if await self.repository.find_by_username(username) is not None:
            raise ConflictError("User already exists")

        try:
            user = await self.repository.insert(username, pwd_context.hash(password), role)
        except ConflictError:
            # Lost a race with a concurrent registration
            raise ConflictError("User already exists")

        logger.info(f"Created {role} account {user['id']}")
        return user

    async def login(self, username: str, password: str) -> Dict[str, Any]:
        """
        Raises:
            ValidationError: "Invalid credentials" for an unknown user or a
                wrong password alike
        """
        user = await self.repository.find_by_username((username or "").strip())
        if user is None:
            pwd_context.dummy_verify()
            raise ValidationError("Invalid credentials")
        if not pwd_context.verify(password or "", user["passwordHash"]):
            logger.warning(f"Failed login for user {user['id']}")
            raise ValidationError("Invalid credentials")

        return await self._start_session(user)

    async def authenticate(self, token: Optional[str]) -> Dict[str, Any]:
        """
        Resolve a bearer token to its claims.

        Raises:
            AuthenticationError: If the token is missing, invalid or revoked
        """
        if not token:
            raise AuthenticationError("Access denied")
        claims = self.sessions.decode_token(token)
        if await self.sessions.is_revoked(claims):
            raise AuthenticationError("Token has been revoked")
        return claims

    async def logout(self, claims: Dict[str, Any]) -> Dict[str, str]:
        await self.sessions.revoke(claims)
        await self.sessions.delete_session(claims["sub"])
        logger.info(f"User {claims['sub']} logged out")
        return {"message": "Logged out successfully"}

    async def profile(self, claims: Dict[str, Any]) -> Dict[str, Any]:
        """
        Returns:
            ``{"user": {...}, "session": {...} or None}``; the session carries
            ``expiresIn`` seconds
        """
        user = await self.repository.find_one(int(claims["sub"]))
        if user is None:
            raise NotFoundError("User not found")
        session = await self.sessions.get_session(user["id"])
        if session is not None:
            session["expiresIn"] = await self.sessions.session_expires_in(user["id"])
        return {"user": public_user(user), "session": session}

    async def _start_session(self, user: Dict[str, Any]) -> Dict[str, Any]:
        token = self.sessions.issue_token(user)
        await self.sessions.create_session(user)
        return {"token": token, "user": public_user(user)}
