"""Category database operations."""

import logging
from typing import Any, Dict, List, Optional

from blog_backend.db.post_db import affected_rows
from blog_backend.db.query_builders import build_count_query

logger = logging.getLogger(__name__)


def row_to_category(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "name": row["name"],
        "description": row["description"],
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


class CategoryRepository:
    """Queries against the categories table.

    Names are unique case-insensitively (unique index on lower(name)); an
    insert or rename that collides raises ConflictError from the pool.
    """

    table = "categories"

    def __init__(self, db):
        self.db = db

    async def find_all(self) -> List[Dict[str, Any]]:
        rows = await self.db.fetch_all("SELECT * FROM categories ORDER BY name")
        return [row_to_category(row) for row in rows]

    async def find_one(self, category_id: int) -> Optional[Dict[str, Any]]:
        row = await self.db.fetch_one("SELECT * FROM categories WHERE id = $1", category_id)
        return row_to_category(row) if row else None

    async def find_by_name(
        self, name: str, exclude_id: Optional[int] = None
    ) -> Optional[Dict[str, Any]]:
        """Case-insensitive lookup, optionally ignoring one category."""
        if exclude_id is None:
            row = await self.db.fetch_one(
                "SELECT * FROM categories WHERE lower(name) = lower($1)", name
            )
        else:
            row = await self.db.fetch_one(
                "SELECT * FROM categories WHERE lower(name) = lower($1) AND id <> $2",
                name,
                exclude_id,
            )
        return row_to_category(row) if row else None

    async def count(self) -> int:
        query, params = build_count_query(self.table)
        return await self.db.fetch_val(query, *params)

    async def insert(self, name: str, description: str = "") -> Dict[str, Any]:
        row = await self.db.fetch_one(
            "INSERT INTO categories (name, description) VALUES ($1, $2) RETURNING *",
            name,
            description or "",
        )
        logger.info(f"Inserted category {row['id']} ({name})")
        return row_to_category(row)

    async def update(
        self,
        category_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Update name and/or description.

        Renaming does not touch posts that reference the old name.

        Returns:
            The updated category, or None if it does not exist
        """
        row = await self.db.fetch_one(
            """
            UPDATE categories
            SET name = COALESCE($1, name),
                description = COALESCE($2, description),
                updated_at = NOW()
            WHERE id = $3
            RETURNING *
            """,
            name,
            description,
            category_id,
        )
        return row_to_category(row) if row else None

    async def delete(self, category_id: int) -> bool:
        status = await self.db.execute("DELETE FROM categories WHERE id = $1", category_id)
        return affected_rows(status) > 0
