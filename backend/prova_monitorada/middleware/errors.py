"""
Prova Monitorada Backend - Error Handling Middleware
=====================================================

What:  Converts any exception raised by a later stage or a mounted router
       into a JSON HTTP 500. The app installs it twice: outermost, where it
       answers CORS rejections, and right inside the CORS stage, so 500s for
       admitted origins still carry the CORS headers.
How:   Wraps call_next in try/except. Exceptions raised inside route
       handlers that FastAPI's own handlers already answered never get
       here; everything else does, including CORSOriginRejected which is
       raised before any route runs.

Response:
    HTTP 500
    {"error": "Erro interno do servidor", "message": <detail>}

    <detail> is the exception message outside production and the fixed
    text "Internal server error" in production. The full traceback is
    logged server-side in both cases.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from prova_monitorada.exceptions import ProvaMonitoradaError
from prova_monitorada.schemas import ErrorResponse

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Internal server error"


def error_message(exc: Exception) -> str:
    if isinstance(exc, ProvaMonitoradaError):
        return exc.message
    return str(exc)


def internal_error_response(exc: Exception, production: bool) -> JSONResponse:
    """Log `exc` and build the 500 response the client sees."""
    message = error_message(exc)
    context = exc.context if isinstance(exc, ProvaMonitoradaError) else {}
    logger.error("Error: %s", message, extra={"context": context}, exc_info=exc)
    payload = ErrorResponse(
        error="Erro interno do servidor",
        message=GENERIC_MESSAGE if production else message,
    )
    return JSONResponse(status_code=500, content=payload.model_dump())


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catch-all 500 handler; `production` hides exception messages."""

    def __init__(self, app: ASGIApp, production: bool) -> None:
        super().__init__(app)
        self.production = production

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return internal_error_response(exc, self.production)
