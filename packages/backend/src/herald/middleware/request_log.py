"""Request logging middleware — request ID + one log line per request.

Learn: Every request gets a UUID, either from the incoming X-Request-ID
header or auto-generated. The ID is bound to structlog's contextvars so
it appears in all log entries for that request, and is returned in the
response header. Noisy health-check paths (/healthz, /metrics, /static) are
served without the access log line.
"""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from herald import metrics

logger = structlog.get_logger()

QUIET_PREFIXES = ("/healthz", "/metrics", "/static/")


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Bind a request ID, log the request, count the response."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        if not request.url.path.startswith(QUIET_PREFIXES):
            client = request.client.host if request.client else "unknown"
            logger.info(
                "http.request",
                method=request.method,
                url=str(request.url),
                client=client,
            )

        response: Response = await call_next(request)
        metrics.http_requests.labels(request.method, str(response.status_code)).inc()
        response.headers["X-Request-ID"] = request_id
        return response
