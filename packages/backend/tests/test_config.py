"""Settings tests — lookup key selection, REDIS_DB fallback, address parsing."""

import pytest

from herald.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("REDIS_VALUE", "DEFAULT_VALUE", "REDIS_ADDR", "REDIS_DB"):
        monkeypatch.delenv(name, raising=False)


def test_lookup_key_falls_back_to_default_when_unset():
    assert Settings(default_value="fallback").lookup_key == "fallback"


def test_empty_redis_value_is_used_as_is(monkeypatch):
    monkeypatch.setenv("REDIS_VALUE", "")
    assert Settings(default_value="fallback").lookup_key == ""


def test_redis_value_wins_over_default():
    assert Settings(redis_value="greeting", default_value="fallback").lookup_key == "greeting"


@pytest.mark.parametrize("raw, expected", [("3", 3), ("abc", 0), ("", 0)])
def test_redis_db_parse_errors_fall_back_to_zero(monkeypatch, raw, expected):
    monkeypatch.setenv("REDIS_DB", raw)
    assert Settings().redis_db == expected


@pytest.mark.parametrize(
    "addr, host, port",
    [
        ("localhost:6379", "localhost", 6379),
        ("cache.internal:7000", "cache.internal", 7000),
        ("myhost", "myhost", 6379),
        (":6380", "localhost", 6380),
    ],
)
def test_redis_addr_is_split_into_host_and_port(addr, host, port):
    settings = Settings(redis_addr=addr)
    assert (settings.redis_host, settings.redis_port) == (host, port)
