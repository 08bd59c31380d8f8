"""Knowledge article database operations."""

import logging
from typing import Any, Dict, List, Optional

from blog_backend.db.post_db import affected_rows
from blog_backend.db.query_builders import NEWEST_FIRST, SelectQuery, cursor_condition
from blog_backend.pagination import Cursor

logger = logging.getLogger(__name__)


def row_to_article(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "title": row["title"],
        "content": row["content"],
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


class KnowledgeRepository:
    """Queries against the knowledge table."""

    table = "knowledge"

    def __init__(self, db):
        self.db = db

    async def find_page(
        self, after: Optional[Cursor] = None, limit: int = 11
    ) -> List[Dict[str, Any]]:
        sql, params = (SelectQuery(self.table)
            .where(*cursor_condition(after))
            .order_by(NEWEST_FIRST)
            .limit(limit)
            .build())

        rows = await self.db.fetch_all(sql, *params)
        return [row_to_article(row) for row in rows]

    async def find_one(self, article_id: int) -> Optional[Dict[str, Any]]:
        row = await self.db.fetch_one("SELECT * FROM knowledge WHERE id = $1", article_id)
        return row_to_article(row) if row else None

    async def insert(self, title: str, content: str) -> Dict[str, Any]:
        row = await self.db.fetch_one(
            "INSERT INTO knowledge (title, content) VALUES ($1, $2) RETURNING *",
            title,
            content,
        )
        logger.info(f"Inserted knowledge article {row['id']}")
        return row_to_article(row)

    async def update(
        self,
        article_id: int,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        row = await self.db.fetch_one(
            """
            UPDATE knowledge
            SET title = COALESCE($1, title),
                content = COALESCE($2, content),
                updated_at = NOW()
            WHERE id = $3
            RETURNING *
            """,
            title,
            content,
            article_id,
        )
        return row_to_article(row) if row else None

    async def delete(self, article_id: int) -> bool:
        status = await self.db.execute("DELETE FROM knowledge WHERE id = $1", article_id)
        return affected_rows(status) > 0
