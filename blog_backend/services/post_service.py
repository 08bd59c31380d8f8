"""Post service: cache-aware reads and invalidating writes for posts."""

import logging
from typing import Any, Dict, Optional, Union

from blog_backend import config
from blog_backend.cache import (
    CacheInvalidator,
    CacheKind,
    CacheTTL,
    dashboard_key,
    home_key,
    normalize_category,
    normalize_filter,
    post_changed,
    post_key,
    post_list_key,
    post_search_key,
    post_viewed,
)
from blog_backend.cache.serializer import to_jsonable
from blog_backend.errors import NotFoundError, ValidationError
from blog_backend.pagination import Cursor, build_page, fetch_size, normalize_limit

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "content", "category")


class PostService:
    """
    Service class for post operations.

    Reads go through the cache (key -> get -> on miss query the store, cache
    the result, return it). Writes hit the store first and then apply the
    invalidation plan for the mutation.

    Args:
        repository: PostRepository (or any object with the same methods)
        cache: CacheService
        invalidator: CacheInvalidator; built from ``cache`` when omitted
    """

    def __init__(self, repository, cache, invalidator: Optional[CacheInvalidator] = None):
        self.repository = repository
        self.cache = cache
        self.invalidator = invalidator or CacheInvalidator(cache)

    # ==================== Reads ====================

    async def list_posts(
        self,
        category: Optional[str] = None,
        cursor: Optional[str] = None,
        last_id: Optional[Union[str, int]] = None,
        limit: Optional[Union[str, int]] = None,
    ) -> Dict[str, Any]:
        """
        One page of posts, newest first, optionally filtered by category.

        Returns:
            ``{"posts": [...], "nextCursor", "nextId", "hasMore"}``

        Raises:
            ValidationError: On a malformed cursor, id or limit
        """
        after = Cursor.parse(cursor, last_id)
        size = normalize_limit(limit)
        normalized = normalize_category(category)

        async def fetch():
            rows = await self.repository.find_page(
                category=normalized, after=after, limit=fetch_size(size)
            )
            return build_page(rows, size, items_field="posts")

        return await self.cache.get_or_set(
            post_list_key(normalized, after, size), fetch, CacheTTL.MEDIUM, CacheKind.POST_PAGE
        )

    async def search_posts(
        self,
        term: str,
        cursor: Optional[str] = None,
        last_id: Optional[Union[str, int]] = None,
        limit: Optional[Union[str, int]] = None,
    ) -> Dict[str, Any]:
        """
        One page of posts whose title, content, caption, tag or category
        contains ``term`` (case-insensitive).
        """
        normalized = normalize_filter(term)
        if not normalized:
            raise ValidationError("Search term is required")
        after = Cursor.parse(cursor, last_id)
        size = normalize_limit(limit)

        async def fetch():
            rows = await self.repository.find_page(
                term=normalized, after=after, limit=fetch_size(size)
            )
            return build_page(rows, size, items_field="posts")

        return await self.cache.get_or_set(
            post_search_key(normalized, after, size), fetch, CacheTTL.SHORT, CacheKind.POST_PAGE
        )

    async def get_post(self, post_id: int) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: If the post does not exist (nothing is cached)
        """
        async def fetch():
            post = await self.repository.find_one(post_id)
            if post is None:
                raise NotFoundError("Post not found")
            return post

        return await self.cache.get_or_set(post_key(post_id), fetch, CacheTTL.LONG, CacheKind.POST)

    async def dashboard(self) -> Dict[str, int]:
        """Totals of posts, views and comments."""
        return await self.cache.get_or_set(
            dashboard_key(), self.repository.stats, CacheTTL.SHORT, CacheKind.DASHBOARD
        )

    async def home(self) -> Dict[str, Any]:
        """Newest posts of each category, for the home page."""
        async def fetch():
            groups = await self.repository.latest_by_category(config.HOME_POSTS_PER_CATEGORY)
            return {"categories": groups}

        return await self.cache.get_or_set(home_key(), fetch, CacheTTL.MEDIUM, CacheKind.HOME_DIGEST)

    # ==================== Writes ====================

    async def create_post(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Raises:
            ValidationError: If title, content or category is missing
            ConflictError: If the generated id is already taken
        """
        missing = [name for name in REQUIRED_FIELDS if not str(fields.get(name) or "").strip()]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        post = await self.repository.insert(fields)
        await self.invalidator.apply(post_changed(post["id"]))
        return to_jsonable(post)

    async def update_post(self, post_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Update editable fields. views and commentCount are never taken from input."""
        for name in REQUIRED_FIELDS:
            if name in fields and fields[name] is not None and not str(fields[name]).strip():
                raise ValidationError(f"{name} cannot be empty")

        post = await self.repository.update(post_id, fields)
        if post is None:
            raise NotFoundError("Post not found")

        await self.invalidator.apply(post_changed(post_id))
        return to_jsonable(post)

    async def delete_post(self, post_id: int) -> Dict[str, str]:
        """Delete a post. Its comments are left in place."""
        if not await self.repository.delete(post_id):
            raise NotFoundError("Post not found")

        await self.invalidator.apply(post_changed(post_id))
        return {"message": "Post deleted successfully"}

    async def increment_view(self, post_id: int) -> Dict[str, Any]:
        """
        Add one view. Only the single-post entry is dropped; lists and the
        dashboard pick the new count up when they expire.
        """
        post = await self.repository.increment(post_id, "views", 1)
        if post is None:
            raise NotFoundError("Post not found")

        await self.invalidator.apply(post_viewed(post_id))
        return to_jsonable(post)
