"""Pytest configuration and shared fixtures for the blog content API tests.

This module provides:
- Project root on sys.path so tests import blog_backend and tests.fixtures
- Environment isolation per test
- A FakeRedis-backed CacheService and in-memory repositories
- Services and a FastAPI TestClient wired to them
"""

import os
import sys
from pathlib import Path

import pytest

# Add project root to Python path to allow imports from blog_backend and tests
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from blog_backend.cache import CacheInvalidator, CacheService  # noqa: E402
from blog_backend.services import (  # noqa: E402
    AuthService,
    CategoryService,
    CommentService,
    KnowledgeService,
    PostService,
    SessionService,
)
from tests.fixtures.fake_redis import FakeRedis, FakeRedisConnection  # noqa: E402
from tests.fixtures.memory_repositories import (  # noqa: E402
    InMemoryCategoryRepository,
    InMemoryCommentRepository,
    InMemoryKnowledgeRepository,
    InMemoryPostRepository,
    InMemoryUserRepository,
)

TEST_API_KEY = "test-api-key"
TEST_JWT_SECRET = "test-jwt-secret-0123456789abcdef0123"


# ==================== Environment Fixtures ====================

@pytest.fixture(scope="function", autouse=True)
def isolate_environment():
    """Restore environment variables after each test."""
    original_env = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def api_keys(monkeypatch):
    monkeypatch.setenv("API_KEYS", f"other-key, {TEST_API_KEY}")
    return TEST_API_KEY


# ==================== Cache Fixtures ====================

@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def redis_connection(fake_redis) -> FakeRedisConnection:
    return FakeRedisConnection(fake_redis)


@pytest.fixture
def cache(redis_connection) -> CacheService:
    return CacheService(redis_connection)


@pytest.fixture
def invalidator(cache) -> CacheInvalidator:
    return CacheInvalidator(cache)


# ==================== Repository Fixtures ====================

@pytest.fixture
def post_repository() -> InMemoryPostRepository:
    return InMemoryPostRepository()


@pytest.fixture
def comment_repository(post_repository) -> InMemoryCommentRepository:
    return InMemoryCommentRepository(post_repository)


@pytest.fixture
def category_repository() -> InMemoryCategoryRepository:
    return InMemoryCategoryRepository()


@pytest.fixture
def knowledge_repository() -> InMemoryKnowledgeRepository:
    return InMemoryKnowledgeRepository()


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


# ==================== Service Fixtures ====================

@pytest.fixture
def post_service(post_repository, cache, invalidator) -> PostService:
    return PostService(post_repository, cache, invalidator)


@pytest.fixture
def comment_service(comment_repository, cache, invalidator) -> CommentService:
    return CommentService(comment_repository, cache, invalidator)


@pytest.fixture
def category_service(category_repository, cache, invalidator) -> CategoryService:
    return CategoryService(category_repository, cache, invalidator)


@pytest.fixture
def knowledge_service(knowledge_repository, cache, invalidator) -> KnowledgeService:
    return KnowledgeService(knowledge_repository, cache, invalidator)


@pytest.fixture
def session_service(cache) -> SessionService:
    return SessionService(cache, TEST_JWT_SECRET, token_ttl=3600, session_ttl=3600)


@pytest.fixture
def auth_service(user_repository, session_service) -> AuthService:
    return AuthService(user_repository, session_service)


# ==================== API Fixtures ====================

@pytest.fixture
def app(
    redis_connection,
    post_repository,
    comment_repository,
    category_repository,
    knowledge_repository,
    user_repository,
):
    """FastAPI app backed by FakeRedis and the in-memory repositories."""
    from blog_backend.main import create_app

    return create_app(
        redis=redis_connection,
        repositories={
            "posts": post_repository,
            "comments": comment_repository,
            "categories": category_repository,
            "knowledge": knowledge_repository,
            "users": user_repository,
        },
        connect=False,
        jwt_secret=TEST_JWT_SECRET,
    )


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client
