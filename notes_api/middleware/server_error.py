"""
Notes API — Server Error Middleware
====================================

What:  Renders exceptions that no handler claimed as the 500 envelope.
How:   Registered innermost, so the response it builds still passes back
       through security headers, request logging and request ID.

Output:
    500 {"erreur": "Erreur serveur", "details": "<str(exc)>"}
"""

import logging

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notes_api.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Erreur serveur"


def server_error_response(details: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"erreur": SERVER_ERROR_MESSAGE, "details": details},
    )


class ServerErrorMiddleware(BaseHTTPMiddleware):
    """Last line of defence inside the middleware chain."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                "[%s] Unexpected error: %s",
                request_id_var.get(""),
                str(exc),
                exc_info=True,
            )
            return server_error_response(str(exc))
