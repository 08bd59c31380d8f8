"""Unit tests for the Redis cache abstraction (blog_backend/cache/service.py).

This module tests:
- get/set/delete/exists/ttl/increment/decrement against FakeRedis
- Graceful degradation when Redis is missing or failing
- Corrupt and mismatched payloads (miss + background delete)
- Prefix deletion with SCAN and glob escaping
- get_or_set read-through behaviour
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from blog_backend.cache import CacheKind, CacheService, CacheTTL
from blog_backend.cache.service import prefix_pattern
from blog_backend.errors import StoreError
from tests.fixtures.fake_redis import FakeRedisConnection


async def _drain_background(cache: CacheService):
    if cache._background:
        await asyncio.gather(*cache._background)


# ==================== Basic Operations ====================


@pytest.mark.asyncio
@pytest.mark.unit
async def test_set_then_get_returns_payload(cache, fake_redis):
    assert await cache.set("post:1", {"id": 1}, ttl=CacheTTL.LONG, kind=CacheKind.POST) is True

    assert await cache.get("post:1", CacheKind.POST) == {"id": 1}
    assert fake_redis.expiry["post:1"] == CacheTTL.LONG


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_miss_returns_none(cache):
    assert await cache.get("post:404", CacheKind.POST) is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_exists_and_ttl(cache):
    await cache.set("categories", [], ttl=CacheTTL.VERY_LONG, kind=CacheKind.CATEGORY_LIST)

    assert await cache.exists("categories") is True
    assert await cache.ttl("categories") == CacheTTL.VERY_LONG

    assert await cache.delete("categories") is True
    assert await cache.exists("categories") is False
    assert await cache.ttl("categories") == -2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_increment_and_decrement(cache):
    assert await cache.increment("counter") == 1
    assert await cache.increment("counter", 5) == 6
    assert await cache.decrement("counter", 2) == 4


@pytest.mark.asyncio
@pytest.mark.unit
async def test_set_refuses_unserializable_payload(cache, fake_redis):
    assert await cache.set("post:1", {"bad": object()}, kind=CacheKind.POST) is False
    assert "post:1" not in fake_redis.store


# ==================== Degradation ====================


@pytest.mark.asyncio
@pytest.mark.unit
async def test_operations_without_client_report_absent():
    cache = CacheService(FakeRedisConnection(client=None))

    assert await cache.get("post:1", CacheKind.POST) is None
    assert await cache.set("post:1", {"id": 1}, kind=CacheKind.POST) is False
    assert await cache.delete("post:1") is False
    assert await cache.delete_by_prefix("posts") == 0
    assert await cache.exists("post:1") is False
    assert await cache.ttl("post:1") == -2
    assert await cache.increment("counter") is None
    assert await cache.decrement("counter") is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cache_resumes_once_redis_comes_back(fake_redis):
    connection = FakeRedisConnection(client=None)
    cache = CacheService(connection)
    assert await cache.set("post:1", {"id": 1}, kind=CacheKind.POST) is False

    connection.client = fake_redis

    assert await cache.set("post:1", {"id": 1}, kind=CacheKind.POST) is True
    assert await cache.get("post:1", CacheKind.POST) == {"id": 1}


@pytest.mark.asyncio
@pytest.mark.unit
async def test_failing_redis_never_raises(cache, fake_redis):
    await cache.set("post:1", {"id": 1}, kind=CacheKind.POST)
    fake_redis.fail = True

    assert await cache.get("post:1", CacheKind.POST) is None
    assert await cache.set("post:2", {"id": 2}, kind=CacheKind.POST) is False
    assert await cache.delete("post:1") is False
    assert await cache.delete_by_prefix("posts") == 0
    assert await cache.exists("post:1") is False
    assert await cache.ttl("post:1") == -2
    assert await cache.increment("counter") is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_or_set_falls_through_to_store_when_redis_fails(cache, fake_redis):
    fake_redis.fail = True
    fetch = AsyncMock(return_value={"id": 1})

    assert await cache.get_or_set("post:1", fetch, CacheTTL.LONG, CacheKind.POST) == {"id": 1}
    assert await cache.get_or_set("post:1", fetch, CacheTTL.LONG, CacheKind.POST) == {"id": 1}
    assert fetch.await_count == 2


# ==================== Corrupt Payloads ====================


@pytest.mark.asyncio
@pytest.mark.unit
async def test_corrupt_payload_is_a_miss_and_gets_deleted(cache, fake_redis):
    fake_redis.store["post:1"] = "{not json"

    assert await cache.get("post:1", CacheKind.POST) is None
    await _drain_background(cache)
    assert "post:1" not in fake_redis.store


@pytest.mark.asyncio
@pytest.mark.unit
async def test_kind_mismatch_is_treated_as_corrupt(cache, fake_redis):
    fake_redis.store["post:1"] = json.dumps({"kind": "post_page", "data": {"posts": []}})

    assert await cache.get("post:1", CacheKind.POST) is None
    await _drain_background(cache)
    assert "post:1" not in fake_redis.store


# ==================== Prefix Deletion ====================


@pytest.mark.unit
def test_prefix_pattern_escapes_glob_characters():
    assert prefix_pattern("posts") == "posts:*"
    assert prefix_pattern("a*b?[c]") == "a\\*b\\?\\[c\\]:*"


@pytest.mark.unit
def test_prefix_pattern_requires_prefix():
    with pytest.raises(ValueError):
        prefix_pattern("")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_by_prefix_removes_only_matching_keys(cache, fake_redis):
    for key in ["posts:list:all:cursor:first:first:10", "posts:dashboard", "post:1", "postsx:1"]:
        fake_redis.store[key] = "x"

    removed = await cache.delete_by_prefix("posts")

    assert removed == 2
    assert set(fake_redis.store) == {"post:1", "postsx:1"}
    assert fake_redis.scan_patterns == ["posts:*"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_by_prefix_treats_glob_characters_literally(cache, fake_redis):
    fake_redis.store["comments:4*:cursor:first:first:10"] = "x"
    fake_redis.store["comments:42:cursor:first:first:10"] = "x"

    assert await cache.delete_by_prefix("comments:4*") == 1
    assert "comments:42:cursor:first:first:10" in fake_redis.store


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_by_prefix_batches_large_key_sets(fake_redis, redis_connection, monkeypatch):
    monkeypatch.setattr("blog_backend.cache.service.DELETE_BATCH_SIZE", 3)
    cache = CacheService(redis_connection)
    for i in range(7):
        fake_redis.store[f"knowledge:{i}"] = "x"

    assert await cache.delete_by_prefix("knowledge") == 7
    assert fake_redis.store == {}


# ==================== Read-through ====================


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_or_set_fetches_once_then_hits(cache):
    fetch = AsyncMock(return_value={"id": 1})

    first = await cache.get_or_set("post:1", fetch, CacheTTL.LONG, CacheKind.POST)
    second = await cache.get_or_set("post:1", fetch, CacheTTL.LONG, CacheKind.POST)

    assert first == second == {"id": 1}
    assert fetch.await_count == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_or_set_propagates_fetch_errors_and_caches_nothing(cache, fake_redis):
    fetch = AsyncMock(side_effect=StoreError("Database fetch_one failed"))

    with pytest.raises(StoreError):
        await cache.get_or_set("post:1", fetch, CacheTTL.LONG, CacheKind.POST)
    assert fake_redis.store == {}
