"""
Prova Monitorada Backend - Body Parsing Middleware
===================================================

What:  Decodes JSON and urlencoded request bodies before routing.
How:   Reads the body once (Starlette replays it to downstream handlers),
       enforces the per-type size limit, and stores the decoded value in
       request.state.body. Requests of any other content type get an empty
       dict.
When:  After CORS admission, before rate limiting.

Failures raise PayloadTooLarge or BodyParseError; nothing is caught here.
Mounted routers read the result through request.state.body or the
`parsed_body` dependency.
"""

import logging
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from prova_monitorada.bodyparser import JSON, URLENCODED, body_kind, parse_json, parse_urlencoded
from prova_monitorada.exceptions import PayloadTooLarge

logger = logging.getLogger(__name__)


class BodyParsingMiddleware(BaseHTTPMiddleware):
    """
    Size-limited JSON / urlencoded body decoding.

    Args:
        json_limit:        Max JSON body in bytes.
        urlencoded_limit:  Max form body in bytes.
    """

    def __init__(self, app: ASGIApp, json_limit: int, urlencoded_limit: int) -> None:
        super().__init__(app)
        self.limits = {JSON: json_limit, URLENCODED: urlencoded_limit}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request.state.body = {}

        kind = body_kind(request.headers.get("content-type"))
        if kind is not None:
            limit = self.limits[kind]

            declared = request.headers.get("content-length", "")
            if declared.isdigit() and int(declared) > limit:
                raise PayloadTooLarge(limit=limit, length=int(declared))

            raw = await request.body()
            if len(raw) > limit:
                raise PayloadTooLarge(limit=limit, length=len(raw))

            request.state.body = parse_json(raw) if kind == JSON else parse_urlencoded(raw)
            logger.debug("Parsed %s body (%d bytes)", kind, len(raw))

        return await call_next(request)


def parsed_body(request: Request) -> Any:
    """FastAPI dependency returning the body decoded by BodyParsingMiddleware."""
    return getattr(request.state, "body", {})
