"""FastAPI application for the blog content API.

create_app() wires the stores, repositories, cache and services together and
stores the services on ``app.state``. The stores are connected on startup and
closed on shutdown; nothing is connected at import time.

Run with:
    python cli.py serve
    uvicorn blog_backend.main:app --port 5001
"""

import logging
import secrets
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from blog_backend import __version__, config
from blog_backend.api import accounts, categories, comments, health, knowledge, posts
from blog_backend.cache import CacheInvalidator, CacheService
from blog_backend.db import (
    CategoryRepository,
    CommentRepository,
    Database,
    KnowledgeRepository,
    PostRepository,
    UserRepository,
)
from blog_backend.errors import BlogError
from blog_backend.redis_client import RedisConnection
from blog_backend.services import (
    AuthService,
    CategoryService,
    CommentService,
    KnowledgeService,
    PostService,
    SessionService,
)

logger = logging.getLogger(__name__)


def configure_logging(level: str = config.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def default_repositories(database: Database) -> Dict[str, Any]:
    return {
        "posts": PostRepository(database),
        "comments": CommentRepository(database),
        "categories": CategoryRepository(database),
        "knowledge": KnowledgeRepository(database),
        "users": UserRepository(database),
    }


def resolve_jwt_secret(secret: Optional[str] = None) -> str:
    """Signing key from the argument or JWT_SECRET, else a per-process random key."""
    secret = secret or config.JWT_SECRET
    if secret:
        return secret
    logger.warning("JWT_SECRET is not set; tokens will not survive a restart")
    return secrets.token_urlsafe(32)


def create_app(
    database: Optional[Database] = None,
    redis: Optional[RedisConnection] = None,
    repositories: Optional[Dict[str, Any]] = None,
    connect: bool = True,
    jwt_secret: Optional[str] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        database: Database to use (default: one built from DatabaseConfig)
        redis: RedisConnection to use (default: one built from RedisConfig)
        repositories: Override the "posts", "comments", "categories",
            "knowledge" or "users" repositories (tests pass in-memory ones)
        connect: Connect the stores on startup and close them on shutdown
        jwt_secret: Token signing key (default: JWT_SECRET)
    """
    database = database or Database()
    redis = redis or RedisConnection()
    repos = default_repositories(database)
    repos.update(repositories or {})

    app = FastAPI(title="Blog Content API", version=__version__)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    cache = CacheService(redis)
    invalidator = CacheInvalidator(cache)

    app.state.database = database
    app.state.redis = redis
    app.state.cache = cache
    app.state.post_service = PostService(repos["posts"], cache, invalidator)
    app.state.comment_service = CommentService(repos["comments"], cache, invalidator)
    app.state.category_service = CategoryService(repos["categories"], cache, invalidator)
    app.state.knowledge_service = KnowledgeService(repos["knowledge"], cache, invalidator)
    app.state.auth_service = AuthService(
        repos["users"], SessionService(cache, resolve_jwt_secret(jwt_secret))
    )

    # ==================== Error handlers ====================

    @app.exception_handler(BlogError)
    async def blog_error_handler(request: Request, exc: BlogError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        return JSONResponse(
            status_code=400,
            content={
                "message": f"{location}: {message}" if location else message,
                "details": {"errors": [
                    {"loc": list(error.get("loc", ())), "msg": error.get("msg")}
                    for error in errors
                ]},
            },
        )

    # ==================== Lifecycle ====================

    @app.on_event("startup")
    async def startup_event():
        if not connect:
            return
        await database.connect()
        try:
            await redis.connect()
        except Exception as e:
            # The API serves uncached reads without Redis
            logger.warning(f"Redis unavailable, continuing without cache: {e}")

    @app.on_event("shutdown")
    async def shutdown_event():
        if not connect:
            return
        await redis.close()
        await database.close()

    # ==================== Routes ====================

    app.include_router(health.router)
    app.include_router(posts.router)
    app.include_router(comments.router)
    app.include_router(categories.router)
    app.include_router(knowledge.router)
    app.include_router(accounts.router)

    return app


configure_logging()
app = create_app()
