"""Post database operations."""

import logging
import time
from typing import Any, Dict, List, Optional

from blog_backend.db.query_builders import (
    NEWEST_FIRST,
    SelectQuery,
    any_column_contains,
    contains_pattern,
    cursor_condition,
)
from blog_backend.errors import ConflictError
from blog_backend.pagination import Cursor

logger = logging.getLogger(__name__)

# API field -> column, for fields a client may set
EDITABLE_FIELDS = {
    "title": "title",
    "content": "content",
    "caption": "caption",
    "category": "category",
    "tag": "tag",
    "image": "image",
    "trivia": "trivia",
}

# Counters only change through increment()
COUNTER_FIELDS = {
    "views": "views",
    "commentCount": "comment_count",
}

SEARCH_COLUMNS = ("title", "content", "caption", "tag", "category")

INSERT_ATTEMPTS = 3

# $1 is the millisecond timestamp; MAX(id) + 1 wins when it is ahead of the clock
INSERT_POST = """
    INSERT INTO posts (id, title, content, caption, category, tag, image, trivia)
    VALUES (
        GREATEST($1, (SELECT COALESCE(MAX(id), 0) + 1 FROM posts)),
        $2, $3, $4, $5, $6, $7, $8
    )
    RETURNING *
"""


def row_to_post(row: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a posts row to its API shape."""
    return {
        "id": row["id"],
        "title": row["title"],
        "content": row["content"],
        "caption": row["caption"],
        "category": row["category"],
        "tag": row["tag"],
        "image": row["image"],
        "trivia": row["trivia"],
        "commentCount": row["comment_count"],
        "views": row["views"],
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


def affected_rows(status: str) -> int:
    """Row count from an asyncpg status string such as "DELETE 1"."""
    try:
        return int(status.split()[-1])
    except (AttributeError, IndexError, ValueError):
        return 0


def new_post_id() -> int:
    """Post ids are the creation time in milliseconds."""
    return int(time.time() * 1000)


class PostRepository:
    """Queries against the posts table."""

    table = "posts"

    def __init__(self, db):
        self.db = db

    async def find_page(
        self,
        category: Optional[str] = None,
        term: Optional[str] = None,
        after: Optional[Cursor] = None,
        limit: int = 11,
    ) -> List[Dict[str, Any]]:
        """
        Fetch up to ``limit`` posts after a cursor, newest first.

        Args:
            category: Case-insensitive substring of the post category
            term: Case-insensitive substring of title, content, caption, tag
                or category
            after: Cursor of the last post already seen (None for first page)
            limit: Row count, normally the page size plus one
        """
        query = SelectQuery(self.table)
        if category:
            query = query.where("category ILIKE $1 ESCAPE '\\'", contains_pattern(category))
        if term:
            query = query.where(any_column_contains(SEARCH_COLUMNS), contains_pattern(term))

        sql, params = (query
            .where(*cursor_condition(after))
            .order_by(NEWEST_FIRST)
            .limit(limit)
            .build())

        rows = await self.db.fetch_all(sql, *params)
        return [row_to_post(row) for row in rows]

    async def find_one(self, post_id: int) -> Optional[Dict[str, Any]]:
        row = await self.db.fetch_one("SELECT * FROM posts WHERE id = $1", post_id)
        return row_to_post(row) if row else None

    async def insert(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a post with a time-derived id.

        The id is the current time in milliseconds, or one past the largest
        existing id when that is greater, so posts created within the same
        millisecond still get distinct ids. Concurrent inserts that pick the
        same id are retried up to INSERT_ATTEMPTS times.

        Raises:
            ConflictError: If every attempt collided
        """
        values = (
            fields["title"],
            fields["content"],
            fields.get("caption") or "",
            fields["category"],
            fields.get("tag") or "",
            fields.get("image") or "",
            fields.get("trivia") or "",
        )
        for attempt in range(1, INSERT_ATTEMPTS + 1):
            try:
                row = await self.db.fetch_one(INSERT_POST, new_post_id(), *values)
                break
            except ConflictError:
                if attempt == INSERT_ATTEMPTS:
                    raise
                logger.warning(f"Post id collision on insert, retrying (attempt {attempt})")

        logger.info(f"Inserted post {row['id']}")
        return row_to_post(row)

    async def update(self, post_id: int, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Update editable fields; unknown and counter fields are ignored.

        Returns:
            The updated post, or None if it does not exist
        """
        assignments = []
        params: List[Any] = []
        for field, column in EDITABLE_FIELDS.items():
            if field in fields and fields[field] is not None:
                params.append(fields[field])
                assignments.append(f"{column} = ${len(params)}")

        if not assignments:
            return await self.find_one(post_id)

        params.append(post_id)
        sql = (
            f"UPDATE posts SET {', '.join(assignments)}, updated_at = NOW() "
            f"WHERE id = ${len(params)} RETURNING *"
        )
        row = await self.db.fetch_one(sql, *params)
        return row_to_post(row) if row else None

    async def delete(self, post_id: int) -> bool:
        status = await self.db.execute("DELETE FROM posts WHERE id = $1", post_id)
        return affected_rows(status) > 0

    async def increment(
        self, post_id: int, field: str, amount: int = 1
    ) -> Optional[Dict[str, Any]]:
        """
        Atomically add ``amount`` to a counter field.

        Returns:
            The updated post, or None if it does not exist
        """
        column = COUNTER_FIELDS.get(field)
        if column is None:
            raise ValueError(f"Not a counter field: {field!r}")

        row = await self.db.fetch_one(
            f"UPDATE posts SET {column} = {column} + $1 WHERE id = $2 RETURNING *",
            amount,
            post_id,
        )
        return row_to_post(row) if row else None

    async def stats(self) -> Dict[str, int]:
        """Totals across all posts for the dashboard."""
        row = await self.db.fetch_one(
            """
            SELECT COUNT(*) AS total_posts,
                   COALESCE(SUM(views), 0) AS total_views,
                   COALESCE(SUM(comment_count), 0) AS total_comments
            FROM posts
            """
        )
        return {
            "totalPosts": int(row["total_posts"]),
            "totalViews": int(row["total_views"]),
            "totalComments": int(row["total_comments"]),
        }

    async def latest_by_category(self, per_category: int) -> List[Dict[str, Any]]:
        """
        Newest ``per_category`` posts of each distinct category value.

        Returns:
            ``[{"category": name, "posts": [...]}, ...]`` ordered by category
        """
        rows = await self.db.fetch_all(
            f"""
            SELECT * FROM (
                SELECT *, ROW_NUMBER() OVER (
                    PARTITION BY category ORDER BY {NEWEST_FIRST}
                ) AS position
                FROM posts
            ) ranked
            WHERE position <= $1
            ORDER BY category, {NEWEST_FIRST}
            """,
            per_category,
        )

        groups: Dict[str, List[Dict[str, Any]]] = {}
        for row in rows:
            groups.setdefault(row["category"], []).append(row_to_post(row))
        return [{"category": name, "posts": posts} for name, posts in groups.items()]
