"""
Prova Monitorada Backend - Rate Limiting Middleware
=====================================================

What:  Per-IP request cap over a fixed window (default: 100 per 15 minutes).
How:   Every request reaching this stage is a hit on the client's counter in
       the injected FixedWindowStore. Hits up to the limit pass; later hits
       in the same window get HTTP 429.
When:  After body parsing, before request logging. No path is exempt,
       /health included.

Response on rate limit:
    HTTP 429 Too Many Requests
    Body:         {"error": "Muitas requisições, tente novamente mais tarde."}
    Retry-After:  Seconds until the client's window resets

Every admitted response carries X-RateLimit-Limit and X-RateLimit-Remaining.

Production Upgrade Path:
    Counters live in process memory. Running several workers multiplies the
    effective limit; a shared store (e.g. Redis INCR + EXPIRE) would need to
    implement the same hit() contract.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from prova_monitorada.ratelimit import FixedWindowStore
from prova_monitorada.schemas import RateLimitResponse

logger = logging.getLogger(__name__)


def client_key(request: Request) -> str:
    """Rate-limit key for a request: the peer IP address."""
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed window rate limiter backed by a FixedWindowStore.

    Args:
        store:         Counter store shared by all requests of the app.
        max_requests:  Hits allowed per key and window.
        message:       Text of the 429 `error` field.
    """

    def __init__(
        self,
        app: ASGIApp,
        store: FixedWindowStore,
        max_requests: int,
        message: str,
    ) -> None:
        super().__init__(app)
        self.store = store
        self.max_requests = max_requests
        self.message = message

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        key = client_key(request)
        entry = self.store.hit(key)

        if entry.count > self.max_requests:
            retry_after = self.store.seconds_until_reset(key)
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                key,
                entry.count,
                self.store.window,
            )
            return JSONResponse(
                status_code=429,
                content=RateLimitResponse(error=self.message).model_dump(),
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(self.max_requests),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(self.max_requests - entry.count)
        return response
