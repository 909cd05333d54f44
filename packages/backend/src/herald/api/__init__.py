"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: The greeting page owns the catch-all /{name} route, so its router
is included last — anything registered after it would never match.
"""

from fastapi import APIRouter

from herald.api.fib import router as fib_router
from herald.api.health import router as health_router
from herald.api.lookup import router as lookup_router
from herald.api.metrics import router as metrics_router
from herald.api.pages import router as pages_router
from herald.api.stress import router as stress_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(metrics_router, tags=["metrics"])
api_router.include_router(fib_router, tags=["compute"])
api_router.include_router(stress_router, tags=["compute"])
api_router.include_router(lookup_router, tags=["redis"])
api_router.include_router(pages_router, tags=["pages"])
