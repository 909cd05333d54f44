"""Health check endpoints.

Learn: /healthz is a pure liveness check. It does not touch Redis, so the
service reports alive even when the Redis-backed features are degraded.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()


@router.get("/healthz")
async def health_check():
    """Report that the process is up."""
    return {"alive": True}


@router.get("/ping", response_class=PlainTextResponse)
async def ping():
    return "pong"
