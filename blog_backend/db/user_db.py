"""User account database operations."""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def row_to_user(row: Dict[str, Any]) -> Dict[str, Any]:
    """Map a users row. ``passwordHash`` never leaves the service layer."""
    return {
        "id": row["id"],
        "username": row["username"],
        "passwordHash": row["password_hash"],
        "role": row["role"],
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


class UserRepository:
    """Queries against the users table.

    Usernames are unique (exact match); a duplicate insert raises
    ConflictError from the pool.
    """

    table = "users"

    def __init__(self, db):
        self.db = db

    async def find_one(self, user_id: int) -> Optional[Dict[str, Any]]:
        row = await self.db.fetch_one("SELECT * FROM users WHERE id = $1", user_id)
        return row_to_user(row) if row else None

    async def find_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        row = await self.db.fetch_one("SELECT * FROM users WHERE username = $1", username)
        return row_to_user(row) if row else None

    async def insert(self, username: str, password_hash: str, role: str = "user") -> Dict[str, Any]:
        row = await self.db.fetch_one(
            """
            INSERT INTO users (username, password_hash, role)
            VALUES ($1, $2, $3)
            RETURNING *
            """,
            username,
            password_hash,
            role,
        )
        logger.info(f"Inserted user {row['id']} ({username}, role={role})")
        return row_to_user(row)
