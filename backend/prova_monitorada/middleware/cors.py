"""
Prova Monitorada Backend - CORS Admission Middleware
=====================================================

What:  First stage of the pipeline. Admits or rejects browser requests
       according to OriginPolicy and adds credentialed CORS headers.
How:   Extends Starlette's CORSMiddleware: origin matching is delegated to
       the policy, and a disallowed Origin raises CORSOriginRejected instead
       of silently omitting the headers. The error handling middleware
       turns that into an HTTP 500.

Behavior per request:
    No Origin header          → passed through untouched (curl, mobile apps)
    Allowed Origin, preflight → answered here (204, no body), later stages
                                never run
    Allowed Origin, other     → passed on; response gets
                                Access-Control-Allow-Origin: <origin>
                                Access-Control-Allow-Credentials: true
                                Vary: Origin
    Disallowed Origin         → CORSOriginRejected
"""

import logging

from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp, Receive, Scope, Send

from prova_monitorada.cors import OriginPolicy
from prova_monitorada.exceptions import CORSOriginRejected

logger = logging.getLogger(__name__)


class OriginPolicyCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose origin check is an OriginPolicy."""

    def __init__(self, app: ASGIApp, policy: OriginPolicy) -> None:
        super().__init__(
            app,
            allow_origins=list(policy.origins),
            allow_methods=["*"],
            allow_headers=["*"],
            allow_credentials=True,
        )
        self.policy = policy

    def is_allowed_origin(self, origin: str) -> bool:
        return self.policy.allows(origin)

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        # Successful preflights are 204 No Content with the same CORS headers
        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return Response(status_code=204, headers=headers)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            origin = Headers(scope=scope).get("origin")
            if origin is not None and not self.policy.allows(origin):
                logger.warning("Rejected cross-origin request from %s", origin)
                raise CORSOriginRejected(origin)

        await super().__call__(scope, receive, send)
