"""Cursor pagination over (createdAt, id).

Every paginated collection is ordered newest first by ``created_at DESC,
id DESC``. A page boundary is the (createdAt, id) pair of the last row the
client saw, and the next page holds the rows strictly after it in that order:

    created_at < cursor OR (created_at = cursor AND id < last_id)

Comparing created_at alone would skip or repeat rows whenever several rows
share a timestamp, so the id tie-break is always part of the condition.

Pages are fetched with one extra row: if ``limit + 1`` rows come back there is
another page, and the extra row is dropped before the page is returned.

Usage:
    cursor = Cursor.parse(request_cursor, request_id)
    limit = normalize_limit(request_limit)
    rows = await repository.find_page(after=cursor, limit=fetch_size(limit))
    page = build_page(rows, limit, items_field="posts")
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Union

from blog_backend import config
from blog_backend.errors import ValidationError

logger = logging.getLogger(__name__)

FIRST_PAGE = "first"

# Ids are stored as BIGINT
MAX_ROW_ID = 2**63 - 1


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 cursor timestamp into an aware UTC datetime.

    Accepts a trailing ``Z``. Naive timestamps are taken as UTC.

    Raises:
        ValidationError: If the value is not an ISO-8601 timestamp
    """
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Invalid cursor timestamp: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: Union[datetime, str]) -> str:
    """Render a timestamp as the canonical cursor string (UTC, ``Z`` suffix)."""
    if isinstance(value, str):
        value = parse_timestamp(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class Cursor:
    """Position after the last row of the previous page."""

    created_at: datetime
    id: int

    @classmethod
    def parse(
        cls,
        cursor: Optional[str],
        last_id: Optional[Union[str, int]],
    ) -> Optional["Cursor"]:
        """
        Build a cursor from request parameters.

        Returns:
            None (first page) unless both cursor and id are present

        Raises:
            ValidationError: If the timestamp or id is malformed
        """
        if cursor in (None, "", FIRST_PAGE) or last_id in (None, "", FIRST_PAGE):
            return None

        created_at = parse_timestamp(str(cursor))
        try:
            row_id = int(last_id)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid cursor id: {last_id!r}")
        if not 1 <= row_id <= MAX_ROW_ID:
            raise ValidationError(f"Cursor id out of range: {last_id!r}")

        return cls(created_at=created_at, id=row_id)

    @property
    def token(self) -> str:
        """Canonical timestamp string, used in cache keys and responses."""
        return format_timestamp(self.created_at)


def normalize_limit(limit: Optional[Union[int, str]]) -> int:
    """
    Validate a requested page size.

    Returns:
        The limit, or DEFAULT_PAGE_LIMIT when none was given

    Raises:
        ValidationError: If the limit is not an integer in [1, MAX_PAGE_LIMIT]
    """
    if limit is None or limit == "":
        return config.DEFAULT_PAGE_LIMIT
    try:
        value = int(limit)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid limit: {limit!r}")

    if value < 1 or value > config.MAX_PAGE_LIMIT:
        raise ValidationError(f"limit must be between 1 and {config.MAX_PAGE_LIMIT}")
    return value


def fetch_size(limit: int) -> int:
    """Rows to request from the store for a page of ``limit`` rows."""
    return limit + 1


def build_page(
    rows: Sequence[Dict[str, Any]],
    limit: int,
    items_field: str = "data",
    created_field: str = "createdAt",
    id_field: str = "id",
) -> Dict[str, Any]:
    """
    Turn an over-fetched row list into a page response.

    Args:
        rows: Up to ``limit + 1`` rows in page order
        limit: Requested page size
        items_field: Response field holding the rows ("posts", "comments", "data")
        created_field: Row field holding the creation timestamp
        id_field: Row field holding the tie-break id

    Returns:
        ``{items_field: [...], "nextCursor", "nextId", "hasMore"}``. The next
        fields are None when there are no further rows.
    """
    items: List[Dict[str, Any]] = list(rows[:limit])
    has_more = len(rows) > limit

    next_cursor = None
    next_id = None
    if has_more and items:
        last = items[-1]
        next_cursor = format_timestamp(last[created_field])
        next_id = last[id_field]

    return {
        items_field: items,
        "nextCursor": next_cursor,
        "nextId": next_id,
        "hasMore": has_more,
    }
