"""Category API endpoints."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field

from blog_backend.auth import require_api_key
from blog_backend.dependencies import get_category_service
from blog_backend.pagination import MAX_ROW_ID
from blog_backend.services import CategoryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/categories", tags=["categories"])


class CategoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Unique category name")
    description: str = Field(default="", description="Short description")


class CategoryUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


@router.get("")
async def list_categories(
    service: CategoryService = Depends(get_category_service),
) -> List[Dict[str, Any]]:
    return await service.list_categories()


@router.get("/{category_id}")
async def get_category(
    category_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    service: CategoryService = Depends(get_category_service),
) -> Dict[str, Any]:
    return await service.get_category(category_id)


@router.post("", status_code=201, dependencies=[Depends(require_api_key)])
async def create_category(
    request: CategoryCreateRequest, service: CategoryService = Depends(get_category_service)
) -> Dict[str, Any]:
    return await service.create_category(request.name, request.description)


@router.put("/{category_id}", dependencies=[Depends(require_api_key)])
async def update_category(
    request: CategoryUpdateRequest,
    category_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    service: CategoryService = Depends(get_category_service),
) -> Dict[str, Any]:
    return await service.update_category(
        category_id, name=request.name, description=request.description
    )


@router.delete("/{category_id}", dependencies=[Depends(require_api_key)])
async def delete_category(
    category_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    service: CategoryService = Depends(get_category_service),
) -> Dict[str, str]:
    return await service.delete_category(category_id)
