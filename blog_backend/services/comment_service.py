"""Comment service."""

import logging
from typing import Any, Dict, Optional, Union

from blog_backend.cache import (
    CacheInvalidator,
    CacheKind,
    CacheTTL,
    comment_changed,
    comment_page_key,
)
from blog_backend.cache.serializer import to_jsonable
from blog_backend.errors import NotFoundError, ValidationError
from blog_backend.pagination import Cursor, build_page, fetch_size, normalize_limit

logger = logging.getLogger(__name__)


class CommentService:
    """
    Comments of a post, paginated newest first.

    Creating or deleting a comment changes the post's commentCount, so both
    writes clear the post entry and every post list along with the comment
    pages of that post.
    """

    def __init__(self, repository, cache, invalidator: Optional[CacheInvalidator] = None):
        self.repository = repository
        self.cache = cache
        self.invalidator = invalidator or CacheInvalidator(cache)

    async def list_for_post(
        self,
        post_id: int,
        cursor: Optional[str] = None,
        last_id: Optional[Union[str, int]] = None,
        limit: Optional[Union[str, int]] = None,
    ) -> Dict[str, Any]:
        """
        Returns:
            ``{"comments": [...], "nextCursor", "nextId", "hasMore"}``
        """
        after = Cursor.parse(cursor, last_id)
        size = normalize_limit(limit)

        async def fetch():
            rows = await self.repository.find_page(post_id, after=after, limit=fetch_size(size))
            return build_page(rows, size, items_field="comments")

        return await self.cache.get_or_set(
            comment_page_key(post_id, after, size), fetch, CacheTTL.MEDIUM, CacheKind.COMMENT_PAGE
        )

    async def create_comment(
        self, post_id: int, comment: str, name: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Raises:
            ValidationError: If the comment text is empty
            NotFoundError: If the post does not exist
        """
        if not comment or not comment.strip():
            raise ValidationError("Comment text is required")

        created = await self.repository.create(post_id, comment, name=(name or "").strip() or None)
        if created is None:
            raise NotFoundError("Post not found")

        await self.invalidator.apply(comment_changed(post_id))
        return to_jsonable(created)

    async def delete_comment(self, comment_id: int) -> Dict[str, str]:
        deleted = await self.repository.delete(comment_id)
        if deleted is None:
            raise NotFoundError("Comment not found")

        await self.invalidator.apply(comment_changed(deleted["postId"]))
        return {"message": "Comment deleted successfully"}
