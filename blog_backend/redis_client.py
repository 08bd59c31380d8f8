"""Redis connection management.

Provides RedisConfig (environment-driven settings) and RedisConnection, an
explicitly constructed owner of one ``redis.asyncio`` connection pool. The
FastAPI startup handler creates the connection, and everything that needs Redis
receives it by injection; nothing reaches for a module-level client.

Usage:
    redis = RedisConnection(RedisConfig())
    await redis.connect()

    cache = CacheService(redis)
    ...

    await redis.close()
"""

import os
import logging
import time
from typing import Optional

from redis import asyncio as aioredis
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


class RedisConfig:
    """Configuration for the Redis connection pool.

    Loads settings from environment variables with sensible defaults.
    REDIS_URL takes precedence over the individual host/port/db settings.
    """

    def __init__(self):
        """Initialize Redis configuration from environment variables."""
        self.url = os.getenv("REDIS_URL")
        self.host = os.getenv("REDIS_HOST", "localhost")
        self.port = int(os.getenv("REDIS_PORT", "6379"))
        self.db = int(os.getenv("REDIS_DB", "0"))
        self.password = os.getenv("REDIS_PASSWORD", None)
        self.max_connections = int(os.getenv("REDIS_MAX_CONNECTIONS", "10"))
        self.socket_timeout = float(os.getenv("REDIS_SOCKET_TIMEOUT", "5"))
        self.socket_connect_timeout = float(os.getenv("REDIS_SOCKET_CONNECT_TIMEOUT", "5"))
        self.retry_on_timeout = os.getenv("REDIS_RETRY_ON_TIMEOUT", "true").lower() == "true"
        # Minimum seconds between reconnect attempts while Redis is down
        self.reconnect_interval = float(os.getenv("REDIS_RECONNECT_INTERVAL", "30"))

    def get_url(self) -> str:
        """Redis URL built from REDIS_URL or the individual components."""
        if self.url:
            return self.url

        redis_url = "redis://"
        if self.password:
            redis_url += f":{self.password}@"
        redis_url += f"{self.host}:{self.port}/{self.db}"
        return redis_url

    def __repr__(self) -> str:
        """String representation (safe - no password)."""
        return (
            f"RedisConfig("
            f"host={self.host}, "
            f"port={self.port}, "
            f"db={self.db}, "
            f"max_connections={self.max_connections})"
        )


class RedisConnection:
    """Lifecycle owner of an async Redis connection pool.

    ``client`` is None until ``connect()`` succeeds and again after
    ``close()``. Consumers call ``ensure_connected()`` and treat a None result
    as "cache unavailable"; a connection lost at startup is retried lazily.
    """

    def __init__(self, config: Optional[RedisConfig] = None):
        self.config = config or RedisConfig()
        self.client: Optional[aioredis.Redis] = None
        self._last_attempt: Optional[float] = None
        self._closed = False

    @property
    def is_connected(self) -> bool:
        return self.client is not None

    async def connect(self) -> aioredis.Redis:
        """Create the pool and verify it with a PING.

        Returns:
            The connected ``redis.asyncio.Redis`` client

        Raises:
            redis.exceptions.RedisError: If the server cannot be reached
        """
        if self.client is not None:
            logger.info("Redis already connected, returning existing client")
            return self.client

        self._closed = False
        self._last_attempt = time.monotonic()
        logger.info(f"Connecting to Redis with config: {self.config}")
        client = aioredis.from_url(
            self.config.get_url(),
            max_connections=self.config.max_connections,
            socket_timeout=self.config.socket_timeout,
            socket_connect_timeout=self.config.socket_connect_timeout,
            retry_on_timeout=self.config.retry_on_timeout,
            decode_responses=True,
        )

        try:
            await client.ping()
        except Exception as e:
            logger.error(f"✗ Failed to connect to Redis: {e}", exc_info=True)
            await client.aclose()
            raise

        self.client = client
        logger.info("✓ Redis connected successfully")
        return client

    async def ensure_connected(self) -> Optional[aioredis.Redis]:
        """
        Return the client, reconnecting first if Redis was unreachable.

        At most one attempt is made per ``reconnect_interval`` seconds, so an
        outage does not add a connect timeout to every request. Never raises.

        Returns:
            The connected client, or None while Redis is unavailable or after
            ``close()``
        """
        if self.client is not None or self._closed:
            return self.client

        now = time.monotonic()
        interval = self.config.reconnect_interval
        if self._last_attempt is not None and now - self._last_attempt < interval:
            return None

        try:
            return await self.connect()
        except Exception as e:
            logger.warning(f"Redis reconnect failed, next attempt in {interval:g}s: {e}")
            return None

    async def ping(self) -> bool:
        """Check if Redis server is reachable."""
        if self.client is None:
            return False
        try:
            return bool(await self.client.ping())
        except Exception as e:
            logger.error(f"Redis ping failed: {e}")
            return False

    async def close(self) -> None:
        """Close the pool. Safe to call when not connected."""
        self._closed = True
        if self.client is None:
            logger.info("Redis is not connected, nothing to close")
            return

        try:
            await self.client.aclose()
            logger.info("✓ Redis connection closed")
        except Exception as e:
            logger.error(f"Error closing Redis connection: {e}", exc_info=True)
        finally:
            self.client = None

    async def health(self) -> dict:
        """Health summary for the /health endpoint."""
        if await self.ensure_connected() is None:
            return {"status": "unavailable", "error": "Not connected"}

        if await self.ping():
            return {
                "status": "healthy",
                "host": self.config.host,
                "port": self.config.port,
                "db": self.config.db,
            }
        return {"status": "degraded", "host": self.config.host, "port": self.config.port}
