from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
import asyncio
import logging
import uuid

import redis.asyncio as redis
from redis.asyncio import Redis

from medidispense.core.config import settings
from medidispense.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

INVENTORY_LOCK = "inventory"


class RedisManager:
    """Redis connection manager"""

    def __init__(self):
        self._redis_client: Optional[Redis] = None
        self._is_connected = False

    async def connect(self, redis_url: str) -> None:
        """Establish Redis connection"""
        try:
            self._redis_client = redis.from_url(
                redis_url,
                encoding="utf-8",
                decode_responses=True,
                max_connections=20,
                retry_on_timeout=True,
                socket_timeout=5,
                socket_connect_timeout=5,
                health_check_interval=30
            )

            # Test connection
            await self._redis_client.ping()
            self._is_connected = True
            logger.info("Redis connection established")

        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self._is_connected = False
            raise

    async def disconnect(self) -> None:
        """Close Redis connection"""
        if self._redis_client:
            await self._redis_client.aclose()
            self._is_connected = False
            logger.info("Redis connection closed")

    @property
    def client(self) -> Redis:
        """Get Redis client"""
        if not self._is_connected or not self._redis_client:
            raise RuntimeError("Redis is not connected")
        return self._redis_client


# Global Redis manager instance
redis_manager = RedisManager()


class LockService:
    """
    Named locks shared by every worker talking to the same Redis.

    A lock is a ``lock:<name>`` key set with NX and an expiry, holding a
    random token; only the holder of the token can delete it.
    """

    def __init__(self, redis_client: Redis):
        self.redis = redis_client

    async def acquire_lock(
        self,
        lock_key: str,
        timeout: int = 30,
        retry_delay: float = 0.1,
        max_retries: int = 30
    ) -> Optional[str]:
        """Acquire distributed lock"""
        try:
            lock_value = str(uuid.uuid4())
            lock_key_full = f"lock:{lock_key}"

            for attempt in range(max_retries):
                result = await self.redis.set(
                    lock_key_full,
                    lock_value,
                    ex=timeout,
                    nx=True
                )

                if result:
                    return lock_value

                await asyncio.sleep(retry_delay)

            return None

        except Exception as e:
            logger.error(f"Lock acquire error: {e}")
            return None

    async def release_lock(self, lock_key: str, lock_value: str) -> bool:
        """Release distributed lock"""
        try:
            lock_key_full = f"lock:{lock_key}"

            # Use Lua script for atomic release
            lua_script = """
            if redis.call("get", KEYS[1]) == ARGV[1] then
                return redis.call("del", KEYS[1])
            else
                return 0
            end
            """

            result = await self.redis.eval(lua_script, 1, lock_key_full, lock_value)
            return result > 0

        except Exception as e:
            logger.error(f"Lock release error: {e}")
            return False

    @asynccontextmanager
    async def lock(self, lock_key: str) -> AsyncIterator[None]:
        """
        Hold the named lock for the duration of the block.

        Raises ExternalServiceError when the lock can't be taken within the
        configured retries, so the block never runs unguarded.
        """
        lock_value = await self.acquire_lock(
            lock_key,
            timeout=settings.LOCK_TIMEOUT,
            retry_delay=settings.LOCK_RETRY_DELAY,
            max_retries=settings.LOCK_MAX_RETRIES,
        )
        if lock_value is None:
            raise ExternalServiceError(
                message="Dispenser is busy, try again",
                details={"lock": lock_key},
                error_code="LOCK_UNAVAILABLE"
            )

        try:
            yield
        finally:
            if not await self.release_lock(lock_key, lock_value):
                logger.warning(f"Lock {lock_key} was not released; it expires after {settings.LOCK_TIMEOUT}s")


lock_service: Optional[LockService] = None


async def init_redis_services(redis_url: str) -> None:
    """Initialize Redis-backed services"""
    global lock_service

    await redis_manager.connect(redis_url)
    lock_service = LockService(redis_manager.client)

    logger.info("Redis services initialized")


async def close_redis_services() -> None:
    """Close Redis-backed services"""
    global lock_service

    await redis_manager.disconnect()
    lock_service = None
    logger.info("Redis services closed")


def get_lock_service() -> LockService:
    if lock_service is None:
        raise RuntimeError("Redis services are not initialized")
    return lock_service
