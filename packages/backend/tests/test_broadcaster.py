"""Broadcaster tests — fan-out, failure pruning, snapshot semantics."""

import asyncio
import time

import pytest
from prometheus_client import REGISTRY

from fakes import FakeConnection
from herald.realtime.broadcaster import Broadcaster
from herald.realtime.registry import ConnectionRegistry


def _registry(*conns):
    registry = ConnectionRegistry()
    for conn in conns:
        registry.add(conn)
    return registry


def _sample(name):
    return REGISTRY.get_sample_value(name) or 0.0


@pytest.mark.asyncio
async def test_failed_peer_is_dropped_and_others_still_receive():
    a, b, c = FakeConnection("a"), FakeConnection("b", fail=True), FakeConnection("c")
    registry = _registry(a, b, c)

    delivered = await Broadcaster(registry).broadcast("M")

    assert delivered == 2
    assert {conn.id for conn in registry.snapshot()} == {"a", "c"}
    assert a.received == ["M"]
    assert c.received == ["M"]
    assert b.received == []
    assert b.close_calls == 1


@pytest.mark.asyncio
async def test_failed_write_bumps_failure_counter():
    registry = _registry(FakeConnection("ok"), FakeConnection("bad", fail=True))
    failures = _sample("herald_broadcast_write_failures_total")
    messages = _sample("herald_broadcast_messages_total")

    await Broadcaster(registry).broadcast("M")

    assert _sample("herald_broadcast_write_failures_total") == failures + 1
    assert _sample("herald_broadcast_messages_total") == messages + 1


@pytest.mark.asyncio
async def test_messages_arrive_in_order_at_every_peer():
    peers = [FakeConnection(f"p{i}") for i in range(5)]
    broadcaster = Broadcaster(_registry(*peers))

    for message in ("m1", "m2", "m3"):
        await broadcaster.broadcast(message)

    for peer in peers:
        assert peer.received == ["m1", "m2", "m3"]


@pytest.mark.asyncio
async def test_connection_added_after_snapshot_gets_only_later_messages():
    registry = ConnectionRegistry()
    late = FakeConnection("late")

    def join_late(conn, message):
        if message == "first":
            registry.add(late)

    early = FakeConnection("early", on_send=join_late)
    registry.add(early)
    broadcaster = Broadcaster(registry)

    await broadcaster.broadcast("first")
    await broadcaster.broadcast("second")

    assert early.received == ["first", "second"]
    assert late.received == ["second"]


@pytest.mark.asyncio
async def test_broadcast_to_empty_registry():
    assert await Broadcaster(ConnectionRegistry()).broadcast("nobody") == 0


@pytest.mark.asyncio
async def test_peer_already_removed_by_acceptor_is_not_double_closed():
    registry = ConnectionRegistry()

    def disconnect_mid_write(conn, message):
        # Acceptor's disconnect path wins the race
        registry.remove(conn)
        conn.fail = True

    flaky = FakeConnection("flaky", on_send=disconnect_mid_write)
    steady = FakeConnection("steady")
    registry.add(flaky)
    registry.add(steady)

    await Broadcaster(registry).broadcast("M")
    # Acceptor's own cleanup runs afterwards
    registry.remove(flaky)
    await flaky.close()

    assert steady.received == ["M"]
    assert registry.snapshot() == [steady]
    assert flaky.close_calls == 2  # second call is the idempotent no-op


@pytest.mark.asyncio
async def test_slow_peer_times_out_and_is_dropped():
    class SlowConnection(FakeConnection):
        async def send_text(self, message):
            await asyncio.sleep(10)

    slow, fast = SlowConnection("slow"), FakeConnection("fast")
    registry = _registry(slow, fast)

    delivered = await Broadcaster(registry, send_timeout=0.05).broadcast("M")

    assert delivered == 1
    assert fast.received == ["M"]
    assert slow not in registry
    assert slow.close_calls == 1


@pytest.mark.asyncio
async def test_hanging_close_does_not_stall_the_broadcast():
    class StuckConnection(FakeConnection):
        async def send_text(self, message):
            await asyncio.sleep(10)

        async def close(self, code=1000):
            await super().close(code)
            await asyncio.sleep(2)

    stuck, healthy = StuckConnection("stuck"), FakeConnection("healthy")
    registry = _registry(stuck, healthy)

    started = time.monotonic()
    delivered = await Broadcaster(registry, send_timeout=0.1).broadcast("M")

    assert time.monotonic() - started < 1.0
    assert delivered == 1
    assert healthy.received == ["M"]
    assert stuck not in registry
    assert stuck.close_calls == 1
