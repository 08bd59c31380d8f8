"""Cache invalidation policy.

Maps each mutation to the cache entries it can make stale. Paginated keys
cannot be enumerated (there is one per cursor position and page size), so
lists are cleared by prefix; single entities are cleared by exact key.

Policy:
    Mutation                        Invalidate
    ------------------------------  -----------------------------------------
    create/update/delete post       prefix posts, key post:{id}
    increment post views            key post:{id}
    create/delete comment           prefix comments:{post_id},
                                    key post:{post_id}, prefix posts
    create/update/delete category   key categories, key categories:{id}
    create/update/delete knowledge  prefix knowledge

A comment changes its post's commentCount, which appears in the single-post
entry and in every post list, so those are cleared along with the comment
pages. Clearing too much costs a cache miss; clearing too little serves stale
data, so the plans err wide.

View counts are deliberately not reflected in post lists or the dashboard
until those entries expire.

Usage:
    invalidator = CacheInvalidator(cache)
    await invalidator.apply(post_changed(post_id))
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from blog_backend.cache import keys

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvalidationPlan:
    """Exact keys and key prefixes to purge after a mutation."""

    keys: Tuple[str, ...] = field(default_factory=tuple)
    prefixes: Tuple[str, ...] = field(default_factory=tuple)

    def __add__(self, other: "InvalidationPlan") -> "InvalidationPlan":
        return InvalidationPlan(
            keys=_dedupe(self.keys + other.keys),
            prefixes=_dedupe(self.prefixes + other.prefixes),
        )


def _dedupe(values: Tuple[str, ...]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(values))


# ============================================================================
# Policy
# ============================================================================


def post_changed(post_id: Optional[Union[int, str]] = None) -> InvalidationPlan:
    """Plan for creating, updating or deleting a post."""
    exact = (keys.post_key(post_id),) if post_id is not None else ()
    return InvalidationPlan(keys=exact, prefixes=(keys.PREFIX_POSTS,))


def post_viewed(post_id: Union[int, str]) -> InvalidationPlan:
    """Plan for a view-count increment."""
    return InvalidationPlan(keys=(keys.post_key(post_id),))


def comment_changed(post_id: Union[int, str]) -> InvalidationPlan:
    """Plan for creating or deleting a comment on a post."""
    return InvalidationPlan(
        keys=(keys.post_key(post_id),),
        prefixes=(keys.comments_prefix(post_id), keys.PREFIX_POSTS),
    )


def category_changed(category_id: Optional[Union[int, str]] = None) -> InvalidationPlan:
    """Plan for creating, updating or deleting a category."""
    exact = (keys.category_list_key(),)
    if category_id is not None:
        exact += (keys.category_key(category_id),)
    return InvalidationPlan(keys=exact)


def knowledge_changed(article_id: Optional[Union[int, str]] = None) -> InvalidationPlan:
    """Plan for creating, updating or deleting a knowledge article.

    The prefix already covers ``knowledge:{id}``; the id is accepted so call
    sites read the same as for the other resources.
    """
    return InvalidationPlan(prefixes=(keys.PREFIX_KNOWLEDGE,))


# ============================================================================
# Execution
# ============================================================================


class CacheInvalidator:
    """Applies invalidation plans through a cache.

    Args:
        cache: Any object with async ``delete(key)`` and
            ``delete_by_prefix(prefix)`` (normally CacheService)
    """

    def __init__(self, cache):
        self.cache = cache

    async def apply(self, plan: InvalidationPlan) -> int:
        """
        Purge every key and prefix in the plan.

        Returns:
            Number of entries removed by prefix plus exact keys attempted.
            Cache failures are absorbed by the cache, never raised.
        """
        removed = 0
        for key in plan.keys:
            if await self.cache.delete(key):
                removed += 1
        for prefix in plan.prefixes:
            removed += await self.cache.delete_by_prefix(prefix)

        logger.info(
            f"Cache invalidated: keys={list(plan.keys)} prefixes={list(plan.prefixes)} "
            f"(removed={removed})"
        )
        return removed
