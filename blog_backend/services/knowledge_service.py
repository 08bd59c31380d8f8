"""Knowledge article service."""

import logging
from typing import Any, Dict, Optional, Union

from blog_backend.cache import (
    CacheInvalidator,
    CacheKind,
    CacheTTL,
    knowledge_changed,
    knowledge_key,
    knowledge_page_key,
)
from blog_backend.cache.serializer import to_jsonable
from blog_backend.errors import NotFoundError, ValidationError
from blog_backend.pagination import Cursor, build_page, fetch_size, normalize_limit

logger = logging.getLogger(__name__)


class KnowledgeService:
    """Knowledge articles: paginated like posts, without counters."""

    def __init__(self, repository, cache, invalidator: Optional[CacheInvalidator] = None):
        self.repository = repository
        self.cache = cache
        self.invalidator = invalidator or CacheInvalidator(cache)

    async def list_articles(
        self,
        cursor: Optional[str] = None,
        last_id: Optional[Union[str, int]] = None,
        limit: Optional[Union[str, int]] = None,
    ) -> Dict[str, Any]:
        """
        Returns:
            ``{"data": [...], "nextCursor", "nextId", "hasMore"}``
        """
        after = Cursor.parse(cursor, last_id)
        size = normalize_limit(limit)

        async def fetch():
            rows = await self.repository.find_page(after=after, limit=fetch_size(size))
            return build_page(rows, size, items_field="data")

        return await self.cache.get_or_set(
            knowledge_page_key(after, size), fetch, CacheTTL.MEDIUM, CacheKind.KNOWLEDGE_PAGE
        )

    async def get_article(self, article_id: int) -> Dict[str, Any]:
        async def fetch():
            article = await self.repository.find_one(article_id)
            if article is None:
                raise NotFoundError("Knowledge not found")
            return article

        return await self.cache.get_or_set(
            knowledge_key(article_id), fetch, CacheTTL.LONG, CacheKind.KNOWLEDGE
        )

    async def create_article(self, title: str, content: str) -> Dict[str, Any]:
        if not (title or "").strip() or not (content or "").strip():
            raise ValidationError("Title and content are required")

        article = await self.repository.insert(title.strip(), content)
        await self.invalidator.apply(knowledge_changed(article["id"]))
        return to_jsonable(article)

    async def update_article(
        self,
        article_id: int,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Dict[str, Any]:
        if title is not None and not title.strip():
            raise ValidationError("Title cannot be empty")
        if content is not None and not content.strip():
            raise ValidationError("Content cannot be empty")

        article = await self.repository.update(
            article_id, title=title.strip() if title is not None else None, content=content
        )
        if article is None:
            raise NotFoundError("Knowledge not found")

        await self.invalidator.apply(knowledge_changed(article_id))
        return to_jsonable(article)

    async def delete_article(self, article_id: int) -> Dict[str, str]:
        if not await self.repository.delete(article_id):
            raise NotFoundError("Knowledge not found")

        await self.invalidator.apply(knowledge_changed(article_id))
        return {"message": "Knowledge deleted successfully"}
