"""Blog content API.

FastAPI service for posts, comments, categories and knowledge articles, backed
by PostgreSQL with a Redis read-through cache.
"""

__version__ = "1.0.0"
