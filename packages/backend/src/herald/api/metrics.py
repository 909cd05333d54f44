"""Prometheus exposition endpoint."""

from fastapi import APIRouter
from fastapi.responses import Response

from herald import metrics

router = APIRouter()


@router.get("/metrics", include_in_schema=False)
async def prometheus_metrics():
    payload, content_type = metrics.render_latest()
    return Response(content=payload, media_type=content_type)
