"""Stress endpoint — many concurrent tasks, each holding a deep stack.

Learn: Every task recurses `depth` coroutine frames, allocating a 1 KiB
buffer per frame, then parks at the bottom until all tasks have reached
theirs. At that moment tasks × depth frames and buffers are alive at
once, which is what shows up in the process memory metrics.
"""

import asyncio
import time

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from herald.api.deps import get_settings
from herald.config import Settings

logger = structlog.get_logger()
router = APIRouter()

FRAME_BYTES = 1024


async def _descend(depth: int, barrier: "_Barrier") -> int:
    buffer = bytearray(FRAME_BYTES)
    if depth <= 1:
        await barrier.wait()
        return len(buffer)
    return len(buffer) + await _descend(depth - 1, barrier)


class _Barrier:
    """Releases everyone once `parties` waiters have arrived."""

    def __init__(self, parties: int):
        self.parties = parties
        self.arrived = 0
        self._released = asyncio.Event()

    async def wait(self) -> None:
        self.arrived += 1
        if self.arrived >= self.parties:
            self._released.set()
        await self._released.wait()


@router.get("/stress")
async def stress(
    tasks: int = Query(1000, ge=1),
    depth: int = Query(50, ge=1),
    settings: Settings = Depends(get_settings),
):
    """Run `tasks` concurrent tasks, each `depth` frames deep."""
    if tasks > settings.stress_max_tasks:
        raise HTTPException(422, f"tasks must be <= {settings.stress_max_tasks}")
    if depth > settings.stress_max_depth:
        raise HTTPException(422, f"depth must be <= {settings.stress_max_depth}")

    started = time.perf_counter()
    barrier = _Barrier(tasks)
    held = await asyncio.gather(*(_descend(depth, barrier) for _ in range(tasks)))
    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

    logger.info("stress.completed", tasks=tasks, depth=depth, elapsed_ms=elapsed_ms)
    return {
        "tasks": tasks,
        "depth": depth,
        "bytes": sum(held),
        "elapsed_ms": elapsed_ms,
    }
