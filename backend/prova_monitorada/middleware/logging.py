"""
Prova Monitorada Backend - Request Logging Middleware
======================================================

What:  Logs one line per request: ISO timestamp, method and path.
How:   Writes before handing the request on, so requests that later fail or
       404 are logged too. It never alters or rejects a request.
When:  After rate limiting: requests answered with 429 are not logged here
       (the rate limiter logs those at WARNING).

Log line:
    2024-01-15T12:00:00.000Z - GET /api/alunos

What we DON'T log (privacy): request bodies, query strings, headers.
"""

import logging
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("prova_monitorada.access")


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs `<timestamp> - <METHOD> <path>` for every request it sees."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        logger.info(
            "%s - %s %s",
            iso_timestamp(datetime.now(timezone.utc)),
            request.method,
            request.url.path,
            extra={"method": request.method, "path": request.url.path},
        )
        return await call_next(request)
