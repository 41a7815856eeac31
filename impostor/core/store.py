"""
Key-value store clients and connection management
房间存储客户端 - Redis与内存两种实现，启动时按配置选择
"""

import redis.asyncio as redis
import asyncio
import logging
import time
from typing import Callable, Dict, Optional, Tuple

from impostor.core.config import settings
from impostor.core.exceptions import StoreError

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Minimal async store contract used by the room service"""

    name = "abstract"

    async def initialize(self):
        pass

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set(self, key: str, value: str, expire: int):
        raise NotImplementedError

    async def exists(self, key: str) -> bool:
        raise NotImplementedError

    async def delete(self, key: str):
        raise NotImplementedError

    async def health_check(self) -> bool:
        return True

    async def close(self):
        pass


class MemoryStore(KeyValueStore):
    """In-process store with per-key expiry, for development and tests"""

    name = "memory"

    def __init__(self, clock: Callable[[], float] = time.time):
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}
        self._clock = clock

    def _live_entry(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at < self._clock():
            del self._data[key]
            return None
        return value

    async def get(self, key: str) -> Optional[str]:
        return self._live_entry(key)

    async def set(self, key: str, value: str, expire: int):
        expires_at = self._clock() + expire if expire else None
        self._data[key] = (value, expires_at)

    async def exists(self, key: str) -> bool:
        return self._live_entry(key) is not None

    async def delete(self, key: str):
        self._data.pop(key, None)


class RedisStore(KeyValueStore):
    """Redis store with connection pooling and a single retry on connection errors"""

    name = "redis"

    def __init__(self, url: str):
        self.url = url
        self.pool: Optional[redis.ConnectionPool] = None
        self.client: Optional[redis.Redis] = None
        self._max_attempts = 2
        self._retry_delay = 0.5

    async def initialize(self):
        """Initialize Redis connection pool"""
        self.pool = redis.ConnectionPool.from_url(
            self.url,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=settings.REDIS_SOCKET_CONNECT_TIMEOUT,
            retry_on_timeout=True,
            health_check_interval=30,
            encoding="utf-8",
            decode_responses=True
        )
        self.client = redis.Redis(connection_pool=self.pool)

        try:
            await self.client.ping()
            logger.info("Redis store initialized successfully")
        except (redis.ConnectionError, redis.TimeoutError) as e:
            # The pool reconnects lazily, requests fail with StoreError until Redis is back
            logger.warning(f"Redis not reachable at startup: {e}")

    async def execute_with_retry(self, operation, *args):
        """Execute Redis operation with automatic retry on connection failure"""
        if self.client is None:
            raise StoreError("Room store is not initialized")

        for attempt in range(self._max_attempts):
            try:
                return await operation(self.client, *args)
            except (redis.ConnectionError, redis.TimeoutError) as e:
                if attempt == self._max_attempts - 1:
                    logger.error(f"Redis operation failed after {self._max_attempts} attempts: {e}")
                    raise StoreError(f"Room store unavailable: {e}") from e
                logger.warning(f"Redis operation attempt {attempt + 1} failed, retrying: {e}")
                await asyncio.sleep(self._retry_delay)
            except redis.RedisError as e:
                logger.error(f"Redis operation failed with non-connection error: {e}")
                raise StoreError(f"Room store error: {e}") from e

    async def get(self, key: str) -> Optional[str]:
        async def _get_operation(client, key):
            return await client.get(key)

        return await self.execute_with_retry(_get_operation, key)

    async def set(self, key: str, value: str, expire: int):
        async def _set_operation(client, key, value, expire):
            return await client.set(key, value, ex=expire)

        await self.execute_with_retry(_set_operation, key, value, expire)

    async def exists(self, key: str) -> bool:
        async def _exists_operation(client, key):
            return await client.exists(key)

        return bool(await self.execute_with_retry(_exists_operation, key))

    async def delete(self, key: str):
        async def _delete_operation(client, key):
            return await client.delete(key)

        await self.execute_with_retry(_delete_operation, key)

    async def health_check(self) -> bool:
        if not self.client:
            return False
        try:
            await self.client.ping()
            return True
        except redis.RedisError as e:
            logger.warning(f"Redis health check failed: {e}")
            return False

    async def close(self):
        """Close Redis connections"""
        if self.client:
            await self.client.aclose()
        if self.pool:
            await self.pool.aclose()

        self.client = None
        self.pool = None
        logger.info("Redis connections closed")


def build_store() -> KeyValueStore:
    """Pick the store implementation from configuration"""
    backend = settings.STORE_BACKEND.lower()

    if backend == "memory":
        return MemoryStore()
    if backend == "redis":
        if not settings.REDIS_URL:
            raise RuntimeError("STORE_BACKEND=redis requires REDIS_URL")
        return RedisStore(settings.REDIS_URL)
    if backend != "auto":
        raise RuntimeError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND}")

    if settings.REDIS_URL:
        return RedisStore(settings.REDIS_URL)
    if settings.ENVIRONMENT == "production":
        raise RuntimeError("Redis is not configured. Set REDIS_URL.")
    logger.warning("REDIS_URL not set, using in-memory room store")
    return MemoryStore()


class StoreManager:
    """Holds the process-wide store selected at startup"""

    def __init__(self):
        self.store: Optional[KeyValueStore] = None

    async def initialize(self, store: Optional[KeyValueStore] = None):
        self.store = store or build_store()
        await self.store.initialize()
        logger.info(f"Room store ready: {self.store.name}")

    def get_store(self) -> KeyValueStore:
        if self.store is None:
            raise StoreError("Room store is not initialized")
        return self.store

    async def close(self):
        if self.store:
            await self.store.close()
        self.store = None


# Global store manager instance
store_manager = StoreManager()


async def init_store(store: Optional[KeyValueStore] = None):
    """Initialize the room store"""
    await store_manager.initialize(store)


def get_store() -> KeyValueStore:
    """Get the room store (FastAPI dependency)"""
    return store_manager.get_store()


async def close_store():
    """Close the room store"""
    await store_manager.close()


async def store_health_check() -> dict:
    """Store health check for monitoring"""
    store = store_manager.store
    if store is None:
        return {"status": "unavailable", "backend": None}
    is_healthy = await store.health_check()
    return {
        "status": "healthy" if is_healthy else "unhealthy",
        "backend": store.name
    }
