"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. The broadcast objects (registry, broadcaster, store) are built
here and hung on app.state, so request handlers and tests reach the same
instances. Lifespan only deals with things that need a running loop:
connecting to Redis and starting/stopping the broadcast pump.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from herald import __version__, metrics
from herald.api import api_router
from herald.config import Settings, settings as default_settings
from herald.logging_config import configure_logging
from herald.middleware.recover import RecoverMiddleware
from herald.middleware.request_log import RequestLogMiddleware
from herald.realtime.broadcaster import Broadcaster
from herald.realtime.pump import BroadcastPump
from herald.realtime.registry import ConnectionRegistry
from herald.realtime.store import RedisStore
from herald.realtime.subscriber import UpstreamSubscriber
from herald.realtime.websocket import router as ws_router

logger = structlog.get_logger()

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at
    shutdown. Redis is optional — if it is down the pump exits at once
    and every other endpoint keeps working.
    """
    settings: Settings = app.state.settings
    store: RedisStore = app.state.store
    logger.info("herald.starting", version=__version__, port=settings.port)

    await store.connect()

    subscriber = UpstreamSubscriber(
        store,
        settings.pubsub_channel,
        poll_interval=settings.subscriber_poll_interval,
    )
    pump = BroadcastPump(subscriber, app.state.broadcaster)
    app.state.pump = pump
    pump.start()
    logger.info("herald.pump_started", channel=settings.pubsub_channel)

    yield

    logger.info("herald.shutdown")
    await pump.stop()
    await store.close()


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[RedisStore] = None,
) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or default_settings
    configure_logging(settings)

    app = FastAPI(
        title="Herald",
        description="Demo service with a Redis-fed WebSocket broadcast",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    registry = ConnectionRegistry()
    app.state.settings = settings
    app.state.store = store or RedisStore(settings)
    app.state.registry = registry
    app.state.broadcaster = Broadcaster(registry, send_timeout=settings.broadcast_send_timeout)
    metrics.ws_connections.set_function(registry.__len__)

    # Starlette middleware executes in reverse order of registration.
    # Request flow: RequestLog → Recover → handler
    app.add_middleware(RecoverMiddleware)
    app.add_middleware(RequestLogMiddleware)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(ws_router)
    # Last: the greeting page's catch-all route
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: herald.main:app)
app = create_app()
