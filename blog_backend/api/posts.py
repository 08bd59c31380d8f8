"""Post API endpoints."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field

from blog_backend.auth import require_api_key
from blog_backend.dependencies import get_post_service
from blog_backend.pagination import MAX_ROW_ID
from blog_backend.services import PostService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["posts"])


class PostCreateRequest(BaseModel):
    """Request model for creating a post."""

    title: str = Field(..., min_length=1, description="Post title")
    content: str = Field(..., min_length=1, description="Post body")
    category: str = Field(..., min_length=1, description="Category name (free text)")
    caption: str = Field(default="", description="Short caption shown in lists")
    tag: str = Field(default="", description="Tag")
    image: str = Field(default="", description="Image URL")
    trivia: str = Field(default="", description="Trivia snippet")


class PostUpdateRequest(BaseModel):
    """Request model for updating a post. Omitted fields are left unchanged."""

    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    caption: Optional[str] = None
    tag: Optional[str] = None
    image: Optional[str] = None
    trivia: Optional[str] = None


@router.get("")
async def list_posts(
    category: Optional[str] = None,
    cursor: Optional[str] = None,
    id: Optional[str] = None,
    limit: Optional[str] = None,
    service: PostService = Depends(get_post_service),
) -> Dict[str, Any]:
    """
    Get a page of posts, newest first.

    Args:
        category: Category filter ("All" or empty for every category)
        cursor: ``nextCursor`` from the previous page
        id: ``nextId`` from the previous page
        limit: Page size (default 10, max 100)

    Returns:
        Dict containing posts, nextCursor, nextId and hasMore
    """
    return await service.list_posts(category=category, cursor=cursor, last_id=id, limit=limit)


@router.get("/dashboard")
async def get_dashboard(service: PostService = Depends(get_post_service)) -> Dict[str, int]:
    """Get totalPosts, totalViews and totalComments."""
    return await service.dashboard()


@router.get("/home")
async def get_home(service: PostService = Depends(get_post_service)) -> Dict[str, Any]:
    """Get the newest posts of each category."""
    return await service.home()


@router.get("/search/{term}")
async def search_posts(
    term: str,
    cursor: Optional[str] = None,
    id: Optional[str] = None,
    limit: Optional[str] = None,
    service: PostService = Depends(get_post_service),
) -> Dict[str, Any]:
    """Search posts by title, content, caption, tag or category."""
    return await service.search_posts(term, cursor=cursor, last_id=id, limit=limit)


@router.get("/{post_id}")
async def get_post(
    post_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    service: PostService = Depends(get_post_service),
) -> Dict[str, Any]:
    return await service.get_post(post_id)


@router.post("/{post_id}/view")
async def increment_view(
    post_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    service: PostService = Depends(get_post_service),
) -> Dict[str, Any]:
    """Count one view of a post. Public, like the post itself."""
    return await service.increment_view(post_id)


@router.post("", status_code=201, dependencies=[Depends(require_api_key)])
async def create_post(
    request: PostCreateRequest, service: PostService = Depends(get_post_service)
) -> Dict[str, Any]:
    return await service.create_post(request.model_dump())


@router.put("/{post_id}", dependencies=[Depends(require_api_key)])
async def update_post(
    request: PostUpdateRequest,
    post_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    service: PostService = Depends(get_post_service),
) -> Dict[str, Any]:
    return await service.update_post(post_id, request.model_dump(exclude_unset=True))


@router.delete("/{post_id}", dependencies=[Depends(require_api_key)])
async def delete_post(
    post_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    service: PostService = Depends(get_post_service),
) -> Dict[str, str]:
    return await service.delete_post(post_id)
