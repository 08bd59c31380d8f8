"""Comment database operations.

Creating or deleting a comment also adjusts posts.comment_count in the same
transaction, so the counter always equals the number of stored comments.
"""

import logging
from typing import Any, Dict, List, Optional

from blog_backend.db.post_db import affected_rows
from blog_backend.db.query_builders import NEWEST_FIRST, SelectQuery, cursor_condition
from blog_backend.pagination import Cursor

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Anonymous"


def row_to_comment(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "postId": row["post_id"],
        "name": row["name"],
        "comment": row["comment"],
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


class CommentRepository:
    """Queries against the comments table."""

    table = "comments"

    def __init__(self, db):
        self.db = db

    async def find_page(
        self,
        post_id: int,
        after: Optional[Cursor] = None,
        limit: int = 11,
    ) -> List[Dict[str, Any]]:
        """Fetch up to ``limit`` comments of a post after a cursor, newest first."""
        sql, params = (SelectQuery(self.table)
            .where("post_id = $1", post_id)
            .where(*cursor_condition(after))
            .order_by(NEWEST_FIRST)
            .limit(limit)
            .build())

        rows = await self.db.fetch_all(sql, *params)
        return [row_to_comment(row) for row in rows]

    async def find_one(self, comment_id: int) -> Optional[Dict[str, Any]]:
        row = await self.db.fetch_one("SELECT * FROM comments WHERE id = $1", comment_id)
        return row_to_comment(row) if row else None

    async def create(
        self, post_id: int, comment: str, name: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Insert a comment and bump its post's comment_count.

        Returns:
            The new comment, or None if the post does not exist (nothing is
            written in that case)
        """
        async with self.db.transaction() as conn:
            bumped = await conn.execute(
                "UPDATE posts SET comment_count = comment_count + 1 WHERE id = $1",
                post_id,
            )
            if affected_rows(bumped) == 0:
                return None

            row = await conn.fetchrow(
                """
                INSERT INTO comments (post_id, name, comment)
                VALUES ($1, $2, $3)
                RETURNING *
                """,
                post_id,
                name or DEFAULT_NAME,
                comment,
            )

        logger.info(f"Comment {row['id']} added to post {post_id}")
        return row_to_comment(dict(row))

    async def delete(self, comment_id: int) -> Optional[Dict[str, Any]]:
        """
        Delete a comment and decrement its post's comment_count.

        Returns:
            The deleted comment (callers need its postId), or None if absent
        """
        async with self.db.transaction() as conn:
            row = await conn.fetchrow(
                "DELETE FROM comments WHERE id = $1 RETURNING *", comment_id
            )
            if row is None:
                return None

            await conn.execute(
                "UPDATE posts SET comment_count = comment_count - 1 "
                "WHERE id = $1 AND comment_count > 0",
                row["post_id"],
            )

        logger.info(f"Comment {comment_id} removed from post {row['post_id']}")
        return row_to_comment(dict(row))
