"""Application configuration via environment variables.

Uses pydantic-settings to load config from plain env vars (REDIS_ADDR,
REDIS_DB, PORT, ...). No config files — 12-factor app style.

Learn: Every setting has a default so the service starts with an empty
environment. Redis being absent is not an error; the Redis-backed
features simply degrade.
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All app configuration. Set via env vars of the same (upper-case) name."""

    # Redis lookup
    default_value: str = "default_value"
    redis_value: Optional[str] = None  # key read by / and /redis

    # Redis connection
    redis_addr: str = "localhost:6379"
    redis_password: str = ""
    redis_db: int = 0
    redis_connect_timeout: float = 2.0

    # Realtime broadcast
    pubsub_channel: str = "broadcast"
    subscriber_poll_interval: float = 1.0
    broadcast_send_timeout: float = 5.0

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    git_commit: str = ""

    # /stress limits
    stress_max_tasks: int = 10_000
    stress_max_depth: int = 200

    @field_validator("redis_db", mode="before")
    @classmethod
    def fallback_redis_db(cls, value):
        """An unparseable REDIS_DB falls back to database 0."""
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0

    @property
    def lookup_key(self) -> str:
        """Redis key read by the greeting page and /redis."""
        if self.redis_value is not None:
            return self.redis_value
        return self.default_value

    @property
    def redis_host(self) -> str:
        host, sep, _ = self.redis_addr.rpartition(":")
        if not sep:
            return self.redis_addr
        return host or "localhost"

    @property
    def redis_port(self) -> int:
        _, sep, port = self.redis_addr.rpartition(":")
        if not sep or not port.isdigit():
            return 6379
        return int(port)


# Singleton — import this everywhere
settings = Settings()
