"""Root banner and health check endpoints."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Request

from blog_backend import __version__

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/")
async def root() -> Dict[str, str]:
    return {"status": "ok", "service": "Blog Content API", "version": __version__}


@router.get("/health")
async def health(request: Request) -> Dict[str, Any]:
    """
    Report database and Redis status.

    The API is "healthy" only with both stores up. A missing Redis makes it
    "degraded" (reads bypass the cache); a missing database makes it
    "unhealthy".
    """
    database = getattr(request.app.state, "database", None)
    redis = getattr(request.app.state, "redis", None)

    db_status = await database.health() if database is not None else {"status": "unavailable"}
    redis_status = await redis.health() if redis is not None else {"status": "unavailable"}

    if db_status["status"] != "healthy":
        overall = "unhealthy"
    elif redis_status["status"] != "healthy":
        overall = "degraded"
    else:
        overall = "healthy"

    return {"status": overall, "database": db_status, "redis": redis_status}
