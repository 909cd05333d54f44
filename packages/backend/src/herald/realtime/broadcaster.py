"""Broadcaster — fan one message out to every registered connection.

Learn: Delivery is best-effort. Each peer in the snapshot gets exactly
one write attempt; a peer whose write fails (error, closed socket, or
slower than the send timeout) is removed and closed, and the loop moves
on to the next peer. No retries, no buffering.
"""

import asyncio
from typing import Optional

import structlog

from herald import metrics
from herald.realtime.registry import ConnectionRegistry

logger = structlog.get_logger()


class Broadcaster:
    def __init__(self, registry: ConnectionRegistry, send_timeout: Optional[float] = 5.0):
        self.registry = registry
        self.send_timeout = send_timeout

    async def broadcast(self, message: str) -> int:
        """Write message to every connection in a registry snapshot.

        Returns the number of peers the message was delivered to.
        """
        targets = self.registry.snapshot()
        delivered = 0

        for conn in targets:
            try:
                await asyncio.wait_for(conn.send_text(message), timeout=self.send_timeout)
            except Exception as e:
                metrics.broadcast_write_failures.inc()
                logger.warning(
                    "broadcast.write_failed",
                    connection_id=conn.id,
                    error=str(e) or type(e).__name__,
                )
                self.registry.remove(conn)
                await self._close(conn)
            else:
                delivered += 1

        metrics.broadcast_messages.inc()
        logger.debug("broadcast.sent", peers=len(targets), delivered=delivered)
        return delivered

    async def _close(self, conn) -> None:
        """Close a dropped peer without letting a stuck handshake stall the loop."""
        try:
            await asyncio.wait_for(conn.close(code=1011), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            logger.warning("broadcast.close_timeout", connection_id=conn.id)
