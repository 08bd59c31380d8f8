"""Comment API endpoints."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field

from blog_backend.auth import require_api_key
from blog_backend.dependencies import get_comment_service
from blog_backend.pagination import MAX_ROW_ID
from blog_backend.services import CommentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/comments", tags=["comments"])


class CommentCreateRequest(BaseModel):
    """Request model for adding a comment. Comments are open to readers."""

    postId: int = Field(..., ge=1, le=MAX_ROW_ID, description="Id of the post being commented on")
    comment: str = Field(..., min_length=1, description="Comment text")
    name: Optional[str] = Field(default=None, description="Display name (default Anonymous)")


@router.post("", status_code=201)
async def create_comment(
    request: CommentCreateRequest, service: CommentService = Depends(get_comment_service)
) -> Dict[str, Any]:
    return await service.create_comment(request.postId, request.comment, name=request.name)


@router.get("/{post_id}")
async def list_comments(
    post_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    cursor: Optional[str] = None,
    id: Optional[str] = None,
    limit: Optional[str] = None,
    service: CommentService = Depends(get_comment_service),
) -> Dict[str, Any]:
    """
    Get a page of a post's comments, newest first.

    Returns:
        Dict containing comments, nextCursor, nextId and hasMore
    """
    return await service.list_for_post(post_id, cursor=cursor, last_id=id, limit=limit)


@router.delete("/{comment_id}", dependencies=[Depends(require_api_key)])
async def delete_comment(
    comment_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    service: CommentService = Depends(get_comment_service),
) -> Dict[str, str]:
    return await service.delete_comment(comment_id)
