"""Request dependencies — pull shared objects off app.state."""

from fastapi import Request

from herald.config import Settings
from herald.realtime.store import RedisStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> RedisStore:
    return request.app.state.store
