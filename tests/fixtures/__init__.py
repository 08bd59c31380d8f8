"""Shared test fixtures for the blog content API tests.

This package provides:
- FakeRedis: in-memory stand-in for a redis.asyncio client
- In-memory repositories with the same methods as the asyncpg ones
- Sample posts, comments, categories and articles
"""

__all__ = [
    "fake_redis",
    "memory_repositories",
    "sample_data",
]
