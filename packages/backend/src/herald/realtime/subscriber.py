"""Upstream subscriber — the Redis SUBSCRIBE side of the broadcast.

Learn: Redis pub/sub is fire-and-forget; messages published while no one
is subscribed are lost, which is fine for live notifications.

messages() is an async iterator over the channel. It polls get_message()
with a bounded timeout instead of blocking in listen(), so close() ends
the iteration within one poll interval rather than leaving the task
stuck on a socket read forever.
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Optional

import structlog
from redis.asyncio.client import PubSub
from redis.exceptions import RedisError

from herald.realtime.store import RedisStore

logger = structlog.get_logger()


class UpstreamSubscriber:
    """One subscription to one channel, for the process lifetime."""

    def __init__(self, store: RedisStore, channel: str, poll_interval: float = 1.0):
        self.store = store
        self.channel = channel
        self.poll_interval = poll_interval
        self._pubsub: Optional[PubSub] = None
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def open(self) -> bool:
        """Subscribe to the channel. False means degraded mode (no Redis)."""
        client = await self.store.connect()
        if client is None:
            logger.warning("subscriber.upstream_unavailable", channel=self.channel)
            return False

        pubsub = client.pubsub()
        try:
            await pubsub.subscribe(self.channel)
        except (RedisError, OSError) as e:
            logger.warning(
                "subscriber.subscribe_failed", channel=self.channel, error=str(e)
            )
            await pubsub.aclose()
            return False

        self._pubsub = pubsub
        logger.info("subscriber.subscribed", channel=self.channel)
        return True

    async def messages(self) -> AsyncIterator[str]:
        """Yield channel payloads in arrival order until close()."""
        if self._pubsub is None:
            return

        pubsub = self._pubsub
        try:
            while not self.closed:
                try:
                    message = await pubsub.get_message(
                        ignore_subscribe_messages=True,
                        timeout=self.poll_interval,
                    )
                except (RedisError, OSError) as e:
                    if not self.closed:
                        logger.error(
                            "subscriber.receive_failed",
                            channel=self.channel,
                            error=str(e),
                        )
                    return

                if message is None or message.get("type") != "message":
                    continue

                data = message["data"]
                if isinstance(data, bytes):
                    data = data.decode("utf-8", errors="replace")
                yield data
        finally:
            self._pubsub = None
            await self._release(pubsub)

    def close(self) -> None:
        """Stop the subscription; a running messages() loop ends shortly."""
        self._closed.set()

    async def _release(self, pubsub: PubSub) -> None:
        try:
            await pubsub.unsubscribe(self.channel)
        except (RedisError, OSError) as e:
            logger.debug("subscriber.unsubscribe_failed", error=str(e))
        await pubsub.aclose()
        logger.info("subscriber.closed", channel=self.channel)
