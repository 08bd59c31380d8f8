"""Cache layer for the blog content API.

Key Modules:
    - service: CacheService, the Redis-backed read-through cache
    - keys: Cache key builders for every cached read
    - serializer: Tagged JSON envelopes for cached payloads
    - invalidation: Mutation -> invalidation plan policy and its executor

Example:
    from blog_backend.cache import CacheService, CacheTTL, CacheKind, post_key

    cache = CacheService(redis_connection)
    post = await cache.get_or_set(
        post_key(post_id),
        fetch=lambda: repository.find_one(post_id),
        ttl=CacheTTL.LONG,
        kind=CacheKind.POST,
    )
"""

from .keys import (
    post_list_key,
    post_search_key,
    post_key,
    dashboard_key,
    home_key,
    comment_page_key,
    comments_prefix,
    category_list_key,
    category_key,
    knowledge_page_key,
    knowledge_key,
    session_key,
    revoked_token_key,
    normalize_filter,
    normalize_category,
)
from .serializer import CacheKind
from .service import CacheService, CacheTTL
from .invalidation import (
    CacheInvalidator,
    InvalidationPlan,
    post_changed,
    post_viewed,
    comment_changed,
    category_changed,
    knowledge_changed,
)

__all__ = [
    # Key builders
    "post_list_key",
    "post_search_key",
    "post_key",
    "dashboard_key",
    "home_key",
    "comment_page_key",
    "comments_prefix",
    "category_list_key",
    "category_key",
    "knowledge_page_key",
    "knowledge_key",
    "session_key",
    "revoked_token_key",
    "normalize_filter",
    "normalize_category",
    # Cache service
    "CacheKind",
    "CacheService",
    "CacheTTL",
    # Invalidation
    "CacheInvalidator",
    "InvalidationPlan",
    "post_changed",
    "post_viewed",
    "comment_changed",
    "category_changed",
    "knowledge_changed",
]
