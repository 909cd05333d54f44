"""RedisStore tests — lazy one-time init and fallback lookups."""

import asyncio

import pytest
from redis.exceptions import ResponseError

from fakes import FakeRedis, factory_for
from herald.realtime.store import RedisStore


@pytest.mark.asyncio
async def test_get_value_hit(settings, store):
    assert await store.get_value("greeting") == "hello from redis"


@pytest.mark.asyncio
async def test_get_value_miss_returns_default(settings, store):
    assert await store.get_value("missing") == "fallback"


@pytest.mark.asyncio
async def test_get_value_error_returns_default(settings, store, fake_redis):
    fake_redis.get_error = ResponseError("WRONGTYPE Operation against a key")
    assert await store.get_value("greeting") == "fallback"


@pytest.mark.asyncio
async def test_unreachable_redis_degrades_to_default(settings):
    down = FakeRedis(values={"greeting": "never seen"}, available=False)
    store = RedisStore(settings, client_factory=factory_for(down))

    assert await store.connect() is None
    assert not store.available
    assert await store.get_value("greeting") == "fallback"
    assert down.closed
    # Unavailability is remembered, not retried per request
    assert down.pings == 1


@pytest.mark.asyncio
async def test_concurrent_first_use_creates_one_client(settings, fake_redis):
    created = []

    def factory(s):
        created.append(s)
        return fake_redis

    store = RedisStore(settings, client_factory=factory)
    clients = await asyncio.gather(*(store.connect() for _ in range(20)))

    assert len(created) == 1
    assert fake_redis.pings == 1
    assert all(c is fake_redis for c in clients)


@pytest.mark.asyncio
async def test_close_releases_client(store, fake_redis):
    await store.connect()
    await store.close()
    assert fake_redis.closed
    assert not store.available
