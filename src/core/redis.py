"""
Redis connection used as the realtime broker.

The broker is optional: when it is disabled or unreachable the client stays
disconnected and every operation reports failure instead of raising, so callers
degrade to working without live updates.
"""
import logging

from redis.asyncio import ConnectionPool, Redis
from redis.asyncio.client import PubSub
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisClient:
    """Pooled async Redis connection that fails soft."""

    def __init__(self, url: str, enabled: bool = True, pool_size: int = 10) -> None:
        self._url = url
        self._enabled = enabled
        self._pool_size = pool_size
        self._client: Redis | None = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """Open the pool and PING once; stays disconnected on failure."""
        if not self._enabled:
            logger.info("Realtime broker disabled by configuration")
            return
        pool = ConnectionPool.from_url(self._url, max_connections=self._pool_size)
        client = Redis(connection_pool=pool)
        try:
            await client.ping()
        except RedisError as e:
            logger.warning("Realtime broker unreachable: %s", e)
            await client.aclose(close_connection_pool=True)
            return
        self._client = client
        logger.info("Realtime broker connected pool_size=%s", self._pool_size)

    async def close(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.aclose(close_connection_pool=True)
            logger.info("Realtime broker connection closed")

    async def ping(self) -> bool:
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    async def publish(self, channel: str, message: str) -> bool:
        """PUBLISH ``message``. Returns False if the broker did not take it."""
        if self._client is None:
            return False
        try:
            receivers = await self._client.publish(channel, message)
        except RedisError as e:
            logger.warning("Redis PUBLISH to %s failed: %s", channel, e)
            return False
        logger.debug("Published to %s receivers=%s", channel, receivers)
        return True

    def pubsub(self) -> PubSub | None:
        """A fresh pub/sub handle, or None while disconnected."""
        if self._client is None:
            return None
        return self._client.pubsub(ignore_subscribe_messages=True)
