"""
ScanPlant Backend — Request Logging Middleware
================================================

What:  One access log line per request: method, path, status, duration,
       request ID and caller.
How:   Level follows the status code (5xx ERROR, 4xx WARNING, else INFO).
       Health checks are not logged.

Privacy:
    Logged: method, path, status, duration, request ID, caller key.
    Not logged: bodies (photos, comment text), role headers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware import caller_key
from app.middleware.request_id import request_id_var

logger = logging.getLogger("scanplant.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access logging with request-ID correlation."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        caller = caller_key(request)
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            caller,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "caller": caller,
            },
        )
        return response
