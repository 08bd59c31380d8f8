"""Key-value cache abstraction over Redis.

CacheService is the only component that talks to Redis for cached reads. It
serializes payloads into tagged JSON envelopes, applies TTLs, and degrades to
"cache absent" whenever Redis is unreachable, slow, or returns garbage: no
method raises because of the cache, so the API keeps working (just slower)
with no Redis at all.

Usage:
    cache = CacheService(redis_connection)

    page = await cache.get_or_set(
        key=post_list_key(category, cursor, limit),
        fetch=lambda: repository.find_page(...),
        ttl=CacheTTL.MEDIUM,
        kind=CacheKind.POST_PAGE,
    )

    await cache.delete_by_prefix("posts")
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Set

from blog_backend import config
from blog_backend.cache.serializer import CacheKind, PayloadError, deserialize, serialize, to_jsonable

logger = logging.getLogger(__name__)

# Characters with special meaning in Redis MATCH patterns
_GLOB_SPECIAL = set("*?[]\\")

DELETE_BATCH_SIZE = 500


class CacheTTL:
    """Cache lifetimes in seconds."""

    SHORT = config.CACHE_TTL_SHORT
    MEDIUM = config.CACHE_TTL_MEDIUM
    LONG = config.CACHE_TTL_LONG
    VERY_LONG = config.CACHE_TTL_VERY_LONG


def prefix_pattern(prefix: str) -> str:
    """Build the ``{prefix}:*`` MATCH pattern with the prefix glob-escaped."""
    if not prefix:
        raise ValueError("prefix is required")
    escaped = "".join(f"\\{ch}" if ch in _GLOB_SPECIAL else ch for ch in prefix)
    return f"{escaped}:*"


class CacheService:
    """Read-through cache with graceful degradation.

    Args:
        redis: Object whose ``ensure_connected()`` returns a
            ``redis.asyncio.Redis`` (normally a RedisConnection). A None client
            means Redis is unavailable and every operation reports a miss.
        scan_count: COUNT hint passed to SCAN during prefix deletion
    """

    def __init__(self, redis: Any, scan_count: int = 500):
        self.redis = redis
        self.scan_count = scan_count
        self._background: Set[asyncio.Task] = set()

    async def _get_client(self, operation: str):
        client = await self.redis.ensure_connected()
        if client is None:
            logger.warning(f"Redis not connected, cache {operation} skipped")
        return client

    # ==================== Reads ====================

    async def get(self, key: str, kind: Optional[CacheKind] = None) -> Any:
        """
        Get a cached payload.

        Args:
            key: Cache key
            kind: Expected payload kind; a different kind counts as corrupt

        Returns:
            The payload, or None on miss, Redis failure, or corrupt payload.
            Corrupt payloads are deleted in the background.
        """
        client = await self._get_client("get")
        if client is None:
            return None

        try:
            raw = await client.get(key)
        except Exception as e:
            logger.error(f"Cache get error for key {key}: {e}")
            return None

        if raw is None:
            logger.debug(f"Cache MISS: {key}")
            return None

        try:
            value = deserialize(raw, kind)
        except PayloadError as e:
            logger.warning(f"Corrupted cache for key {key}, deleting: {e}")
            self._schedule_delete(key)
            return None

        logger.debug(f"Cache HIT: {key}")
        return value

    async def exists(self, key: str) -> bool:
        client = await self._get_client("exists")
        if client is None:
            return False
        try:
            return (await client.exists(key)) > 0
        except Exception as e:
            logger.error(f"Cache exists error for {key}: {e}")
            return False

    async def ttl(self, key: str) -> int:
        """Remaining lifetime in seconds: -1 without expiry, -2 if absent or unavailable."""
        client = await self._get_client("ttl")
        if client is None:
            return -2
        try:
            return await client.ttl(key)
        except Exception as e:
            logger.error(f"Cache ttl error for {key}: {e}")
            return -2

    # ==================== Writes ====================

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int = CacheTTL.MEDIUM,
        kind: CacheKind = CacheKind.POST,
    ) -> bool:
        """
        Store a payload with an expiry.

        Returns:
            True if stored, False if Redis is unavailable or the write failed
        """
        client = await self._get_client("set")
        if client is None:
            return False

        try:
            raw = serialize(value, kind)
        except ValueError as e:
            logger.error(f"Cache set skipped for key {key}: {e}")
            return False

        try:
            await client.set(key, raw, ex=ttl)
        except Exception as e:
            logger.error(f"Cache set error for key {key}: {e}")
            return False

        logger.info(f"Cache SET: {key} (ttl={ttl}s)")
        return True

    async def delete(self, key: str) -> bool:
        client = await self._get_client("delete")
        if client is None:
            return False
        try:
            await client.delete(key)
        except Exception as e:
            logger.error(f"Cache delete error for key {key}: {e}")
            return False

        logger.info(f"Cache DELETE: {key}")
        return True

    async def increment(self, key: str, amount: int = 1) -> Optional[int]:
        """
        Atomically add ``amount`` to a plain integer key.

        Counters live outside the envelope format, so read them back with
        increment(key, 0) rather than get().

        Returns:
            The new value, or None if Redis is unavailable
        """
        client = await self._get_client("increment")
        if client is None:
            return None
        try:
            return await client.incrby(key, amount)
        except Exception as e:
            logger.error(f"Cache increment error for {key}: {e}")
            return None

    async def decrement(self, key: str, amount: int = 1) -> Optional[int]:
        return await self.increment(key, -amount)

    async def delete_by_prefix(self, prefix: str) -> int:
        """
        Delete every key matching ``{prefix}:*``.

        Keys are listed with SCAN (never KEYS) and removed in batches.

        Returns:
            Number of keys removed (0 if Redis is unavailable)
        """
        client = await self._get_client("prefix delete")
        if client is None:
            return 0

        pattern = prefix_pattern(prefix)
        deleted = 0
        try:
            batch: List[str] = []
            async for key in client.scan_iter(match=pattern, count=self.scan_count):
                batch.append(key)
                if len(batch) >= DELETE_BATCH_SIZE:
                    deleted += await client.delete(*batch)
                    batch = []
            if batch:
                deleted += await client.delete(*batch)
        except Exception as e:
            logger.error(f"Cache prefix delete error for {pattern}: {e}")
            return deleted

        logger.info(f"Cache prefix deleted: {pattern} ({deleted} keys)")
        return deleted

    # ==================== Read-through ====================

    async def get_or_set(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
        ttl: int,
        kind: CacheKind,
    ) -> Any:
        """
        Return the cached payload for key, or fetch, cache and return it.

        The fetched value is normalised to its JSON form first, so callers see
        the same structure on a hit and on a miss. Errors raised by ``fetch``
        (store failures, not-found) propagate unchanged.
        """
        cached = await self.get(key, kind)
        if cached is not None:
            return cached

        data = to_jsonable(await fetch())
        await self.set(key, data, ttl=ttl, kind=kind)
        return data

    # ==================== Internals ====================

    def _schedule_delete(self, key: str) -> None:
        task = asyncio.create_task(self.delete(key))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
