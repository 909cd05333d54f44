"""Redis store — the process-wide, lazily created Redis client.

Learn: The Redis client is created once, on first use, and shared by the
/redis lookup, the greeting page and the broadcast subscriber. An
asyncio.Lock plus an "initialised" flag makes concurrent first callers
wait for a single connection attempt instead of racing to create several.

If the first PING fails the store remembers that Redis is unavailable
and every caller gets the fallback behaviour (default value, no
subscription). The service keeps running without Redis.

The store is constructed explicitly and handed to the app
(create_app(store=...)), so tests inject a fake client factory.
"""

import asyncio
from typing import Callable, Optional

import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError

from herald.config import Settings

logger = structlog.get_logger()

ClientFactory = Callable[[Settings], aioredis.Redis]


def default_client_factory(settings: Settings) -> aioredis.Redis:
    """Build a Redis client from REDIS_ADDR / REDIS_PASSWORD / REDIS_DB."""
    return aioredis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password or None,
        db=settings.redis_db,
        socket_connect_timeout=settings.redis_connect_timeout,
        encoding="utf-8",
        decode_responses=True,
    )


class RedisStore:
    """Shared Redis handle with one-time initialisation and fallbacks."""

    def __init__(
        self,
        settings: Settings,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.settings = settings
        self._client_factory = client_factory or default_client_factory
        self._client: Optional[aioredis.Redis] = None
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def available(self) -> bool:
        return self._client is not None

    async def connect(self) -> Optional[aioredis.Redis]:
        """Return the shared client, creating it on first call.

        Returns None when Redis was unreachable at initialisation.
        """
        if self._initialized:
            return self._client

        async with self._lock:
            if self._initialized:
                return self._client

            client = self._client_factory(self.settings)
            try:
                await client.ping()
            except (RedisError, OSError) as e:
                logger.warning(
                    "redis.unavailable",
                    addr=self.settings.redis_addr,
                    error=str(e),
                )
                await client.aclose()
                client = None
            else:
                logger.info(
                    "redis.connected",
                    addr=self.settings.redis_addr,
                    db=self.settings.redis_db,
                )

            self._client = client
            self._initialized = True

        return self._client

    async def get_value(self, key: str) -> str:
        """GET key, falling back to DEFAULT_VALUE on miss or error."""
        client = await self.connect()
        if client is None:
            return self.settings.default_value

        try:
            value = await client.get(key)
        except RedisError as e:
            logger.warning("redis.get_failed", key=key, error=str(e))
            return self.settings.default_value

        if value is None:
            return self.settings.default_value
        return value

    async def close(self) -> None:
        """Close the shared client (if any). The store can reconnect later."""
        async with self._lock:
            client, self._client = self._client, None
            self._initialized = False
        if client is not None:
            await client.aclose()
            logger.info("redis.closed")
