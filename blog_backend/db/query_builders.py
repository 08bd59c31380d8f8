"""Typed query builders for the blog tables.

Builders return SQL strings and parameter tuples that can be passed straight
to the Database helpers.

Architecture:
    - Fluent, immutable SelectQuery (each method returns a new instance)
    - Automatic parameter placeholder management ($1, $2, ...)
    - Cursor and text-search conditions shared by every paginated table

Usage Examples:
    query, params = (SelectQuery("posts")
        .where("category ILIKE $1 ESCAPE '\\'", contains_pattern("tech"))
        .where(*cursor_condition(cursor))
        .order_by(NEWEST_FIRST)
        .limit(11)
        .build())

    rows = await db.fetch_all(query, *params)
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import Any, Optional, Sequence, Tuple

from blog_backend.pagination import Cursor

logger = logging.getLogger(__name__)

# Sort order shared by every paginated table
NEWEST_FIRST = "created_at DESC, id DESC"

_PLACEHOLDER = re.compile(r"\$(\d+)")
_IDENTIFIER = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


# ============================================================================
# SELECT QUERY BUILDER
# ============================================================================

@dataclass(frozen=True)
class SelectQuery:
    """
    Fluent builder for SELECT queries.

    Example:
        query, params = (SelectQuery("comments")
            .where("post_id = $1", 42)
            .order_by(NEWEST_FIRST)
            .limit(10)
            .build())

    Notes:
        - Placeholders count from $1 inside each where() call and are
          renumbered across all conditions at build time
        - Multiple where() calls are combined with AND
    """

    table: str
    conditions: Tuple[str, ...] = ()
    params: Tuple[Any, ...] = ()
    order: Optional[str] = None
    limit_value: Optional[int] = None

    def __post_init__(self):
        if not validate_identifier(self.table):
            raise ValueError(f"Invalid table name: {self.table!r}")

    def where(self, condition: Optional[str], *params: Any) -> "SelectQuery":
        """
        Add a WHERE condition with its own $1-based placeholders.

        A None condition is ignored, so optional filters can be chained
        without branching at the call site.
        """
        if condition is None:
            return self
        renumbered = _renumber_placeholders(condition, len(self.params))
        return replace(
            self,
            conditions=self.conditions + (renumbered,),
            params=self.params + params,
        )

    def order_by(self, order: str) -> "SelectQuery":
        return replace(self, order=order)

    def limit(self, n: int) -> "SelectQuery":
        if n < 0:
            raise ValueError("limit must be non-negative")
        return replace(self, limit_value=n)

    def build(self) -> Tuple[str, Tuple[Any, ...]]:
        """
        Build the final SQL query and parameters.

        Returns:
            Tuple of (query_string, parameters_tuple)
        """
        parts = [f"SELECT * FROM {self.table}"]

        if self.conditions:
            parts.append("WHERE " + " AND ".join(f"({c})" for c in self.conditions))
        if self.order:
            parts.append(f"ORDER BY {self.order}")
        if self.limit_value is not None:
            parts.append(f"LIMIT {self.limit_value}")

        return " ".join(parts), self.params


def _renumber_placeholders(condition: str, offset: int) -> str:
    """Replace $N with $(N + offset)."""
    return _PLACEHOLDER.sub(lambda m: f"${int(m.group(1)) + offset}", condition)


# ============================================================================
# COMMON CONDITIONS
# ============================================================================

def cursor_condition(cursor: Optional[Cursor]) -> Tuple[Optional[str], ...]:
    """
    Condition selecting rows strictly after a cursor under NEWEST_FIRST.

    Returns:
        (condition, created_at, id) for a cursor, or (None,) for the first page.
        Unpack straight into SelectQuery.where().

    Example:
        >>> cursor_condition(None)
        (None,)
    """
    if cursor is None:
        return (None,)
    return (
        "created_at < $1 OR (created_at = $1 AND id < $2)",
        cursor.created_at,
        cursor.id,
    )


def contains_pattern(term: str) -> str:
    """
    ILIKE pattern matching ``term`` anywhere, with LIKE wildcards escaped.

    Example:
        >>> contains_pattern("50%_off")
        '%50\\\\%\\\\_off%'
    """
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def any_column_contains(columns: Sequence[str]) -> str:
    """
    Condition matching $1 (a contains_pattern) against any of the columns.

    Example:
        >>> any_column_contains(["title", "tag"])
        "title ILIKE $1 ESCAPE '\\\\' OR tag ILIKE $1 ESCAPE '\\\\'"
    """
    for column in columns:
        if not validate_identifier(column):
            raise ValueError(f"Invalid column name: {column!r}")
    return " OR ".join(f"{column} ILIKE $1 ESCAPE '\\'" for column in columns)


def build_count_query(table: str) -> Tuple[str, Tuple[Any, ...]]:
    """
    Build a COUNT query over a whole table.

    Example:
        query, params = build_count_query("categories")
        count = await db.fetch_val(query, *params)
    """
    if not validate_identifier(table):
        raise ValueError(f"Invalid table name: {table!r}")
    return f"SELECT COUNT(*) FROM {table}", ()


# ============================================================================
# VALIDATION HELPERS
# ============================================================================

def validate_identifier(identifier: str) -> bool:
    """
    Validate that a string is a safe SQL identifier.

    Notes:
        - Allows alphanumeric characters and underscores
        - Must start with a letter or underscore
        - Maximum length 63 characters (PostgreSQL limit)
    """
    if not identifier or len(identifier) > 63:
        return False
    return bool(_IDENTIFIER.match(identifier))
