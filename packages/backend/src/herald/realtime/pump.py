"""Broadcast pump — the background task that drives subscriber → broadcaster.

Learn: Runs in the FastAPI lifespan like any other background worker:
start() at startup, stop() at shutdown. Each message is awaited through
the broadcaster before the next one is pulled, so there is never more
than one broadcast in flight and publish order is preserved.
"""

import asyncio
from typing import Optional

import structlog

from herald.realtime.broadcaster import Broadcaster
from herald.realtime.subscriber import UpstreamSubscriber

logger = structlog.get_logger()


class BroadcastPump:
    def __init__(self, subscriber: UpstreamSubscriber, broadcaster: Broadcaster):
        self.subscriber = subscriber
        self.broadcaster = broadcaster
        self.received = 0
        self._task: Optional[asyncio.Task] = None

    async def run(self) -> None:
        """Consume the subscription until it is closed."""
        if not await self.subscriber.open():
            logger.info("pump.disabled", reason="upstream unavailable")
            return

        async for message in self.subscriber.messages():
            self.received += 1
            await self.broadcaster.broadcast(message)

        logger.info("pump.stopped", received=self.received)

    def start(self) -> asyncio.Task:
        self._task = asyncio.create_task(self.run(), name="herald-broadcast-pump")
        return self._task

    async def stop(self) -> None:
        """Close the subscription and wait for the pump to drain."""
        self.subscriber.close()
        task, self._task = self._task, None
        if task is None:
            return

        # One poll interval is enough for messages() to notice the close
        grace = self.subscriber.poll_interval + 1.0
        try:
            await asyncio.wait_for(task, timeout=grace)
        except asyncio.TimeoutError:
            logger.warning("pump.stop_timeout", grace=grace)
        except asyncio.CancelledError:
            # Only the pump task was cancelled; stop() itself was not
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
        except Exception:
            logger.exception("pump.failed")
