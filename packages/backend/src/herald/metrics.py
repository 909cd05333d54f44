"""Prometheus metrics for the HTTP layer and the broadcast subsystem.

Exposed on /metrics together with the default process/GC collectors.
"""

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, generate_latest

http_requests = Counter(
    "herald_http_requests_total",
    "HTTP requests served",
    labelnames=("method", "status"),
)

ws_connections = Gauge(
    "herald_ws_connections",
    "WebSocket connections currently registered for broadcast",
)

broadcast_messages = Counter(
    "herald_broadcast_messages_total",
    "Messages received from the upstream channel and broadcast",
)

broadcast_write_failures = Counter(
    "herald_broadcast_write_failures_total",
    "Per-connection broadcast writes that failed and dropped the peer",
)


def render_latest() -> tuple[bytes, str]:
    """Current exposition payload and its content type."""
    return generate_latest(), CONTENT_TYPE_LATEST
