"""Fibonacci endpoint — a tiny CPU-bound request handler."""

import random

import structlog
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

logger = structlog.get_logger()
router = APIRouter()

FIB_LIMIT = 45


def fibonacci(n: int) -> int:
    """n-th Fibonacci number, computed iteratively."""
    if n <= 1:
        return n
    a, b = 0, 1
    for _ in range(2, n + 1):
        a, b = b, a + b
    return b


@router.get("/fib", response_class=PlainTextResponse)
async def fib():
    """Fibonacci of a random n in [0, 45)."""
    n = random.randrange(FIB_LIMIT)
    logger.info("fib.computed", n=n)
    return f"{fibonacci(n)}\n"
