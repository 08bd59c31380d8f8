"""Category service."""

import logging
from typing import Any, Dict, List, Optional

from blog_backend.cache import (
    CacheInvalidator,
    CacheKind,
    CacheTTL,
    category_changed,
    category_key,
    category_list_key,
)
from blog_backend.cache.serializer import to_jsonable
from blog_backend.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("Sports", "Sports news and updates"),
    ("Technology", "Latest tech news and innovations"),
    ("Entertainment", "Movies, music, and entertainment news"),
    ("Lifestyle", "Lifestyle tips and trends"),
    ("News", "General news and current events"),
    ("Education", "Educational content and resources"),
    ("Art", "Art and creative expressions"),
]


class CategoryService:
    """
    Categories change rarely, so the full list is cached for a day.

    Names are unique regardless of case. Posts reference categories by name
    and are not updated when a category is renamed or deleted.
    """

    def __init__(self, repository, cache, invalidator: Optional[CacheInvalidator] = None):
        self.repository = repository
        self.cache = cache
        self.invalidator = invalidator or CacheInvalidator(cache)

    async def list_categories(self) -> List[Dict[str, Any]]:
        return await self.cache.get_or_set(
            category_list_key(), self.repository.find_all, CacheTTL.VERY_LONG, CacheKind.CATEGORY_LIST
        )

    async def get_category(self, category_id: int) -> Dict[str, Any]:
        async def fetch():
            category = await self.repository.find_one(category_id)
            if category is None:
                raise NotFoundError("Category not found")
            return category

        return await self.cache.get_or_set(
            category_key(category_id), fetch, CacheTTL.LONG, CacheKind.CATEGORY
        )

    async def create_category(self, name: str, description: str = "") -> Dict[str, Any]:
        """
        Raises:
            ValidationError: If the name is empty
            ConflictError: If a category with that name exists (any case)
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        if await self.repository.find_by_name(name):
            raise ConflictError("Category already exists")

        category = await self.repository.insert(name, description or "")
        await self.invalidator.apply(category_changed(category["id"]))
        return to_jsonable(category)

    async def update_category(
        self,
        category_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Category name cannot be empty")
            if await self.repository.find_by_name(name, exclude_id=category_id):
                raise ConflictError("Category already exists")

        category = await self.repository.update(category_id, name=name, description=description)
        if category is None:
            raise NotFoundError("Category not found")

        await self.invalidator.apply(category_changed(category_id))
        return to_jsonable(category)

    async def delete_category(self, category_id: int) -> Dict[str, str]:
        if not await self.repository.delete(category_id):
            raise NotFoundError("Category not found")

        await self.invalidator.apply(category_changed(category_id))
        return {"message": "Category deleted successfully"}

    async def seed_defaults(self) -> int:
        """
        Insert the default categories into an empty table.

        Returns:
            Number of categories inserted (0 if any already existed)
        """
        existing = await self.repository.count()
        if existing:
            logger.info(f"Categories already exist ({existing}), skipping seed")
            return 0

        for name, description in DEFAULT_CATEGORIES:
            await self.repository.insert(name, description)

        await self.invalidator.apply(category_changed())
        logger.info(f"✓ Seeded {len(DEFAULT_CATEGORIES)} categories")
        return len(DEFAULT_CATEGORIES)
