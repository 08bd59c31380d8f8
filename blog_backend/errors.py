"""Domain exceptions for the blog content API.

Every error a service can raise derives from BlogError and carries the HTTP
status it maps to, so the FastAPI exception handlers in main.py can render a
consistent ``{"message": ...}`` body without knowing each type.

Cache failures never appear here: CacheService absorbs them and reports a miss.
"""

from typing import Any, Dict, Optional


class BlogError(Exception):
    """Base exception for all blog API errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        body: Dict[str, Any] = {"message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class NotFoundError(BlogError):
    """The requested entity does not exist."""

    status_code = 404


class ConflictError(BlogError):
    """A unique field (e.g. category name) is already taken."""

    status_code = 400


class ValidationError(BlogError):
    """Malformed request parameters or mutation payload."""

    status_code = 400


class AuthenticationError(BlogError):
    """Missing, invalid, expired or revoked access token."""

    status_code = 401


class StoreError(BlogError):
    """The document store could not complete an operation.

    There is no fallback for the source of truth, so this always surfaces as a
    server error.
    """

    status_code = 500
