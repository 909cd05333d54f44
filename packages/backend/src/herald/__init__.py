"""Herald — a small demo HTTP service with a Redis-fed WebSocket broadcast.

Most endpoints are single-shot request/response handlers (greeting page,
Fibonacci, Redis lookup, health, metrics). The interesting part lives in
herald.realtime: messages published on a Redis channel are fanned out to
every connected WebSocket client.
"""

__version__ = "0.1.0"
