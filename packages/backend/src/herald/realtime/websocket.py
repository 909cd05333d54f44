"""WebSocket endpoint — clients connect to /ws to receive broadcasts.

Learn: Each client gets one Connection, registered right after the
handshake. The handler then waits on two things at once:
1. Client listener — reads from the socket until the peer disconnects
2. Closed signal — set when the broadcaster drops this peer after a failed write

Whichever finishes first ends the handler; the other is cancelled and the
connection is removed from the registry and closed. Both steps are
idempotent, so racing with the broadcaster is harmless.

No sub-protocol, no authentication, any origin.
"""

import asyncio

import structlog
from fastapi import APIRouter, WebSocket

from herald.realtime.connection import Connection
from herald.realtime.registry import ConnectionRegistry

logger = structlog.get_logger()
router = APIRouter()


async def _client_listener(conn: Connection) -> None:
    """Drain inbound frames until disconnect. Answers `ping` with `pong`."""
    while True:
        message = await conn.websocket.receive()
        if message["type"] == "websocket.disconnect":
            return
        if message.get("text") == "ping":
            await conn.send_text("pong")


@router.websocket("/ws")
async def broadcast_websocket(websocket: WebSocket):
    """Register the peer for broadcasts until it disconnects."""
    registry: ConnectionRegistry = websocket.app.state.registry
    client = f"{websocket.client.host}:{websocket.client.port}" if websocket.client else "unknown"

    try:
        await websocket.accept()
    except (RuntimeError, OSError) as e:
        logger.warning("ws.upgrade_failed", client=client, error=str(e))
        return

    conn = Connection(websocket)
    registry.add(conn)
    logger.info("ws.connected", connection_id=conn.id, client=client, active=len(registry))

    listener_task = asyncio.create_task(_client_listener(conn))
    closed_task = asyncio.create_task(conn.wait_closed())

    try:
        done, _ = await asyncio.wait(
            [listener_task, closed_task],
            return_when=asyncio.FIRST_COMPLETED,
        )
        if listener_task in done and not listener_task.cancelled():
            error = listener_task.exception()
            if error is not None:
                logger.warning("ws.receive_failed", connection_id=conn.id, error=str(error))
    finally:
        for task in (listener_task, closed_task):
            task.cancel()
        dropped_by_broadcast = conn.closed
        registry.remove(conn)
        await conn.close()
        logger.info(
            "ws.disconnected",
            connection_id=conn.id,
            client=client,
            dropped=dropped_by_broadcast,
            active=len(registry),
        )
