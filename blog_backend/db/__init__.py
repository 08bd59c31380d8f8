"""Database access layer for the blog content API.

Main exports:
- DatabaseConfig: Pool configuration
- Database: asyncpg pool owner with query helpers (connect on startup)
- create_tables: Idempotent schema creation

Repositories (one per table) take a Database and return API-shaped dicts:
- PostRepository, CommentRepository, CategoryRepository, KnowledgeRepository
- UserRepository for accounts
"""

from .pool import DatabaseConfig, Database, STORE_ERRORS
from .query_builders import (
    SelectQuery,
    NEWEST_FIRST,
    cursor_condition,
    contains_pattern,
    any_column_contains,
    build_count_query,
    validate_identifier,
)
from .schema import create_tables
from .post_db import PostRepository
from .comment_db import CommentRepository
from .category_db import CategoryRepository
from .knowledge_db import KnowledgeRepository
from .user_db import UserRepository

__all__ = [
    # Connection pool
    "DatabaseConfig",
    "Database",
    "STORE_ERRORS",
    # Query builders
    "SelectQuery",
    "NEWEST_FIRST",
    "cursor_condition",
    "contains_pattern",
    "any_column_contains",
    "build_count_query",
    "validate_identifier",
    # Schema
    "create_tables",
    # Repositories
    "PostRepository",
    "CommentRepository",
    "CategoryRepository",
    "KnowledgeRepository",
    "UserRepository",
]
