"""Knowledge article API endpoints."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field

from blog_backend.auth import require_api_key
from blog_backend.dependencies import get_knowledge_service
from blog_backend.pagination import MAX_ROW_ID
from blog_backend.services import KnowledgeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/knowledges", tags=["knowledge"])


class KnowledgeCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, description="Article title")
    content: str = Field(..., min_length=1, description="Rich-text HTML body")


class KnowledgeUpdateRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None


@router.get("")
async def list_articles(
    cursor: Optional[str] = None,
    id: Optional[str] = None,
    limit: Optional[str] = None,
    service: KnowledgeService = Depends(get_knowledge_service),
) -> Dict[str, Any]:
    """
    Get a page of knowledge articles, newest first.

    Returns:
        Dict containing data, nextCursor, nextId and hasMore
    """
    return await service.list_articles(cursor=cursor, last_id=id, limit=limit)


@router.get("/{article_id}")
async def get_article(
    article_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    service: KnowledgeService = Depends(get_knowledge_service),
) -> Dict[str, Any]:
    return await service.get_article(article_id)


@router.post("", status_code=201, dependencies=[Depends(require_api_key)])
async def create_article(
    request: KnowledgeCreateRequest, service: KnowledgeService = Depends(get_knowledge_service)
) -> Dict[str, Any]:
    return await service.create_article(request.title, request.content)


@router.put("/{article_id}", dependencies=[Depends(require_api_key)])
async def update_article(
    request: KnowledgeUpdateRequest,
    article_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    service: KnowledgeService = Depends(get_knowledge_service),
) -> Dict[str, Any]:
    return await service.update_article(article_id, title=request.title, content=request.content)


@router.delete("/{article_id}", dependencies=[Depends(require_api_key)])
async def delete_article(
    article_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    service: KnowledgeService = Depends(get_knowledge_service),
) -> Dict[str, str]:
    return await service.delete_article(article_id)
