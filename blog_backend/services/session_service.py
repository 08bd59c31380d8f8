"""Access tokens and the Redis-side session state behind them.

Tokens are HS256 JWTs carrying the user id (``sub``), username, role and a
random ``jti``. Redis holds two kinds of entries, both through CacheService:

    session:user:{user_id}    login metadata, expires after SESSION_TTL
    blacklist:token:{jti}     set on logout, expires with the token itself

Like every cache read, the session store degrades when Redis is down: sessions
are not recorded and revocation cannot be checked, so a logged-out token stays
valid until it expires.
"""

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

import jwt

from blog_backend import config
from blog_backend.cache import CacheKind, revoked_token_key, session_key
from blog_backend.errors import AuthenticationError
from blog_backend.pagination import format_timestamp

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["sub", "jti", "exp", "iat"]


class SessionService:
    """Issues and verifies access tokens and tracks sessions in the cache."""

    def __init__(
        self,
        cache,
        secret: str,
        algorithm: str = config.JWT_ALGORITHM,
        token_ttl: int = config.JWT_EXPIRY_SECONDS,
        session_ttl: int = config.SESSION_TTL,
    ):
        if not secret:
            raise ValueError("secret is required")
        self.cache = cache
        self.secret = secret
        self.algorithm = algorithm
        self.token_ttl = token_ttl
        self.session_ttl = session_ttl

    # ==================== Tokens ====================

    def issue_token(self, user: Dict[str, Any]) -> str:
        now = int(time.time())
        claims = {
            "sub": str(user["id"]),
            "username": user["username"],
            "role": user["role"],
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + self.token_ttl,
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Verify a token's signature and expiry.

        Returns:
            The token claims

        Raises:
            AuthenticationError: If the token is expired, malformed or signed
                with another key
        """
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected access token: {e}")
            raise AuthenticationError("Invalid token") from e

    async def revoke(self, claims: Dict[str, Any]) -> bool:
        """
        Blacklist a token until it would have expired anyway.

        Returns:
            True if the token is (or no longer needs to be) blacklisted
        """
        remaining = int(claims["exp"]) - int(time.time())
        if remaining <= 0:
            return True
        return await self.cache.set(
            revoked_token_key(claims["jti"]), True, ttl=remaining, kind=CacheKind.REVOKED_TOKEN
        )

    async def is_revoked(self, claims: Dict[str, Any]) -> bool:
        return await self.cache.exists(revoked_token_key(claims["jti"]))

    # ==================== Sessions ====================

    async def create_session(self, user: Dict[str, Any]) -> bool:
        session = {
            "username": user["username"],
            "role": user["role"],
            "loginTime": format_timestamp(datetime.now(timezone.utc)),
        }
        stored = await self.cache.set(
            session_key(user["id"]), session, ttl=self.session_ttl, kind=CacheKind.SESSION
        )
        if stored:
            logger.info(f"Session created for user {user['id']}")
        return stored

    async def get_session(self, user_id: Union[int, str]) -> Optional[Dict[str, Any]]:
        return await self.cache.get(session_key(user_id), CacheKind.SESSION)

    async def delete_session(self, user_id: Union[int, str]) -> bool:
        return await self.cache.delete(session_key(user_id))

    async def session_expires_in(self, user_id: Union[int, str]) -> int:
        """Seconds left on the session, -2 if there is none."""
        return await self.cache.ttl(session_key(user_id))
