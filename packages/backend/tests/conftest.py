"""Test fixtures — an app wired to an in-memory Redis fake.

Learn: create_app() takes the RedisStore as a parameter, so tests build
the store around a FakeRedis and never need a real Redis server. The
httpx client talks to the app in-process through ASGITransport (no
lifespan), which is all the HTTP routes need.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from fakes import FakeRedis, factory_for
from herald.config import Settings
from herald.main import create_app
from herald.realtime.store import RedisStore


@pytest.fixture()
def settings():
    return Settings(
        redis_value="greeting",
        default_value="fallback",
        subscriber_poll_interval=0.05,
        broadcast_send_timeout=1.0,
        stress_max_tasks=500,
        stress_max_depth=50,
    )


@pytest.fixture()
def fake_redis():
    return FakeRedis(values={"greeting": "hello from redis"})


@pytest.fixture()
def store(settings, fake_redis):
    return RedisStore(settings, client_factory=factory_for(fake_redis))


@pytest.fixture()
def app(settings, store):
    return create_app(settings, store=store)


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
