"""Herald CLI — run the server, print the build version, publish test messages.

Usage:
    herald serve --port 8080            # Serve on 0.0.0.0:8080
    herald version                      # Print the git commit the build came from
    herald publish "hello everyone"     # Push a message to every /ws client
"""

from __future__ import annotations

import asyncio
import socket
from typing import Optional

import click
import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError

from herald import __version__
from herald.config import settings

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind a listening TCP socket with SO_REUSEADDR and SO_REUSEPORT.

    SO_REUSEPORT lets a replacement process bind the port before the old
    one has exited. It is skipped on platforms that lack it.
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        if hasattr(socket, "SO_REUSEPORT"):
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
        sock.bind((host, port))
        sock.listen(socket.SOMAXCONN)
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


async def _publish(channel: str, message: str) -> int:
    client = aioredis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password or None,
        db=settings.redis_db,
        socket_connect_timeout=settings.redis_connect_timeout,
    )
    try:
        return await client.publish(channel, message)
    finally:
        await client.aclose()


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="herald")
def main():
    """Herald — demo HTTP service with a Redis-fed WebSocket broadcast."""


@main.command()
@click.option("--host", default=settings.host, show_default=True, help="Interface to bind")
@click.option("--port", "-p", default=settings.port, show_default=True, help="Port to use")
def serve(host: str, port: int):
    """Run the HTTP server until SIGINT/SIGTERM."""
    import uvicorn

    from herald.main import create_app

    try:
        sock = bind_socket(host, port)
    except OSError as e:
        raise click.ClickException(f"Failed to start server: {e}")

    logger.info("herald.listening", host=host, port=port)
    config = uvicorn.Config(create_app(settings), log_config=None)
    server = uvicorn.Server(config)
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()


@main.command()
def version():
    """Print the git commit this build came from."""
    click.echo(f"Version: {settings.git_commit}")


@main.command()
@click.argument("message")
@click.option("--channel", "-c", default=settings.pubsub_channel, show_default=True,
              help="Channel to publish on")
def publish(message: str, channel: str):
    """Publish MESSAGE on the broadcast channel."""
    try:
        receivers = asyncio.run(_publish(channel, message))
    except (RedisError, OSError) as e:
        raise click.ClickException(f"Publish failed: {e}")
    click.echo(f"Delivered to {receivers} subscriber(s) on {channel}")


if __name__ == "__main__":
    main()
