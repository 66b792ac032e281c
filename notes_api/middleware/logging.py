"""
Notes API — Request Logging Middleware
=======================================

What:  One log line when a request arrives and one when it completes.
How:   The arrival line ("METHOD path") is written before dispatch; the
       completion line adds status, duration and client address.
When:  After RequestIDMiddleware, so both lines carry the request ID.

Example output (timestamp added by the logging formatter):
    2024-01-15T12:00:00 [INFO] notes_api.access: [a1b2c3d4] POST /notes
    2024-01-15T12:00:00 [INFO] notes_api.access: POST /notes 201 4.2ms [a1b2c3d4] from 127.0.0.1

Request bodies and uploaded file contents are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notes_api.middleware.request_id import request_id_var

logger = logging.getLogger("notes_api.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every HTTP request and its outcome.

    Completion lines are logged at a level matching the status:
        5xx → ERROR, 4xx → WARNING, everything else → INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        # Health probes run every few seconds
        if path == "/health":
            return await call_next(request)

        logger.info("[%s] %s %s", rid, method, path)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
        )

        return response
