"""Real-time broadcast — Redis pub/sub fanned out to WebSockets.

Learn: One Redis SUBSCRIBE feeds every connected client:

    publisher → Redis channel → UpstreamSubscriber → Broadcaster → each Connection

The ConnectionRegistry is the only shared mutable state. The
BroadcastPump is a single background task, so at most one broadcast is in
flight and messages reach each client in publish order.
"""
