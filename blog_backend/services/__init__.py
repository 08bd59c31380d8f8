"""Service layer: cache-aware business logic per resource."""

from .post_service import PostService
from .comment_service import CommentService
from .category_service import CategoryService, DEFAULT_CATEGORIES
from .knowledge_service import KnowledgeService
from .session_service import SessionService
from .auth_service import AuthService, ROLES

__all__ = [
    "PostService",
    "CommentService",
    "CategoryService",
    "DEFAULT_CATEGORIES",
    "KnowledgeService",
    "SessionService",
    "AuthService",
    "ROLES",
]
