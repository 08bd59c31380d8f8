"""FastAPI dependency injection utilities.

Services are built once at startup (see main.create_app) and stored on
``app.state``. These dependencies hand them to route handlers.

Example:
    @router.get("/api/posts")
    async def list_posts(service: PostService = Depends(get_post_service)):
        return await service.list_posts()
"""

import logging

from fastapi import HTTPException, Request, status

from blog_backend.services import (
    AuthService,
    CategoryService,
    CommentService,
    KnowledgeService,
    PostService,
)

logger = logging.getLogger(__name__)


def _get_state(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        logger.error(f"{name} is not initialized")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{name} not initialized",
        )
    return service


def get_post_service(request: Request) -> PostService:
    return _get_state(request, "post_service")


def get_comment_service(request: Request) -> CommentService:
    return _get_state(request, "comment_service")


def get_category_service(request: Request) -> CategoryService:
    return _get_state(request, "category_service")


def get_knowledge_service(request: Request) -> KnowledgeService:
    return _get_state(request, "knowledge_service")


def get_auth_service(request: Request) -> AuthService:
    return _get_state(request, "auth_service")
