"""Connection — one WebSocket peer that receives broadcasts.

Learn: A connection can be torn down from two places: the acceptor
(peer disconnected) and the broadcaster (a write failed). close() is
idempotent so whichever path gets there second is a no-op, and the
closed event wakes the acceptor when the broadcaster dropped the peer.
"""

import asyncio
import uuid

import structlog
from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

logger = structlog.get_logger()


class ConnectionClosedError(Exception):
    """Raised when writing to a connection that is already closed."""

    def __init__(self, connection_id: str):
        self.connection_id = connection_id
        super().__init__(f"connection {connection_id} is closed")


class Connection:
    """Handle on one accepted WebSocket."""

    def __init__(self, websocket: WebSocket):
        self.id = uuid.uuid4().hex
        self.websocket = websocket
        self._closed = asyncio.Event()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Connection {self.id} {state}>"

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def send_text(self, message: str) -> None:
        """Write one text frame to the peer."""
        if self.closed:
            raise ConnectionClosedError(self.id)
        await self.websocket.send_text(message)

    async def close(self, code: int = 1000) -> bool:
        """Close the socket once. Returns False if it was already closed."""
        if self.closed:
            return False
        self._closed.set()

        ws = self.websocket
        if (
            ws.client_state == WebSocketState.DISCONNECTED
            or ws.application_state == WebSocketState.DISCONNECTED
        ):
            return True

        try:
            await ws.close(code=code)
        except (RuntimeError, OSError, WebSocketDisconnect) as e:
            # Peer went away between the state check and the close frame
            logger.debug("ws.close_failed", connection_id=self.id, error=str(e))
        return True

    async def wait_closed(self) -> None:
        await self._closed.wait()
