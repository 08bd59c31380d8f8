"""Table definitions for the blog content API.

Every statement is idempotent (IF NOT EXISTS), so create_tables() can run on
every deploy. Called by ``cli.py init-db``.

Tables:
    posts       id is the creation time in milliseconds (externally visible)
    comments    post_id references posts.id by value, no foreign key
    categories  name is unique case-insensitively
    knowledge   long-form articles with rich-text HTML content
    users       accounts; password_hash is a passlib hash string
"""

import logging

logger = logging.getLogger(__name__)

TABLES = [
    """
    CREATE TABLE IF NOT EXISTS posts (
        id BIGINT PRIMARY KEY,
        title TEXT NOT NULL,
        content TEXT NOT NULL,
        caption TEXT NOT NULL DEFAULT '',
        category TEXT NOT NULL,
        tag TEXT NOT NULL DEFAULT '',
        image TEXT NOT NULL DEFAULT '',
        trivia TEXT NOT NULL DEFAULT '',
        comment_count INTEGER NOT NULL DEFAULT 0,
        views INTEGER NOT NULL DEFAULT 0,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS comments (
        id BIGSERIAL PRIMARY KEY,
        post_id BIGINT NOT NULL,
        name TEXT NOT NULL DEFAULT 'Anonymous',
        comment TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS categories (
        id BIGSERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS knowledge (
        id BIGSERIAL PRIMARY KEY,
        title TEXT NOT NULL,
        content TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        id BIGSERIAL PRIMARY KEY,
        username TEXT NOT NULL,
        password_hash TEXT NOT NULL,
        role TEXT NOT NULL DEFAULT 'user',
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
]

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_posts_created_at ON posts(created_at DESC, id DESC)",
    "CREATE INDEX IF NOT EXISTS idx_posts_category ON posts(lower(category))",
    "CREATE INDEX IF NOT EXISTS idx_comments_post_created_at "
    "ON comments(post_id, created_at DESC, id DESC)",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_categories_name ON categories(lower(name))",
    "CREATE INDEX IF NOT EXISTS idx_knowledge_created_at ON knowledge(created_at DESC, id DESC)",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_users_username ON users(username)",
]


async def create_tables(db) -> None:
    """Create all tables and indexes inside one transaction."""
    logger.info("Creating tables...")
    async with db.transaction() as conn:
        for statement in TABLES + INDEXES:
            await conn.execute(statement)
    logger.info(f"✓ Schema ready ({len(TABLES)} tables, {len(INDEXES)} indexes)")
