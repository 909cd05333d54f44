"""Connection registry — the set of peers eligible for broadcast."""

import threading

from herald.realtime.connection import Connection


class ConnectionRegistry:
    """Thread-safe map of connection id → Connection.

    Every operation takes the same lock for the duration of the dict
    operation only; writes to peers happen on a snapshot, outside the
    lock. The underlying dict is never handed out.
    """

    def __init__(self):
        self._connections: dict[str, Connection] = {}
        self._lock = threading.Lock()

    def add(self, conn: Connection) -> None:
        with self._lock:
            self._connections[conn.id] = conn

    def remove(self, conn: Connection) -> bool:
        """Drop conn if present. Returns True only for the call that removed it."""
        with self._lock:
            return self._connections.pop(conn.id, None) is not None

    def snapshot(self) -> list[Connection]:
        """Point-in-time copy of the registered connections."""
        with self._lock:
            return list(self._connections.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def __contains__(self, conn: Connection) -> bool:
        with self._lock:
            return conn.id in self._connections
