"""Recover middleware — turn unhandled handler errors into a plain 500.

Learn: The traceback goes to the log, the client only sees
"Internal Server Error". Runs inside RequestLogMiddleware so the error
log line carries the request ID.
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

logger = structlog.get_logger()


class RecoverMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception(
                "http.unhandled_error",
                method=request.method,
                path=request.url.path,
            )
            return PlainTextResponse("Internal Server Error", status_code=500)
