"""
Prova Monitorada Backend - Custom Exception Hierarchy
======================================================

What:  Application-specific exceptions raised by the ingress pipeline.
How:   Each exception carries a message and an optional context dict.
       The message is what the error handler reports outside production;
       the context is only ever logged.
Who:   Raised by the CORS and body-parsing stages (and free for mounted
       routers to use); converted to HTTP 500 by the handlers in main.py.

Exception Hierarchy:
    ProvaMonitoradaError (base)
    ├── CORSOriginRejected   → 500 (origin not on the allow-list)
    ├── BodyParseError       → 500 (malformed JSON / form body)
    └── PayloadTooLarge      → 500 (body above the configured limit)

Every subclass maps to 500: the pipeline deliberately has a single error
response shape. Rate limiting (429) and unknown routes (404) answer
directly and do not go through these classes.
"""

from typing import Any, Dict, Optional


class ProvaMonitoradaError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Human-readable description (reported outside production)
        context:  Additional debug info (logged, never returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class CORSOriginRejected(ProvaMonitoradaError):
    """
    Raised when a browser request carries an Origin outside the allow-list.

    HTTP: 500 Internal Server Error. The frontend's fallback handling relies
    on this being a generic server error rather than a 403.
    """

    def __init__(self, origin: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["origin"] = origin
        super().__init__(message="Not allowed by CORS", context=ctx)
        self.origin = origin


class BodyParseError(ProvaMonitoradaError):
    """Raised when a JSON or urlencoded body cannot be decoded."""

    def __init__(
        self,
        message: str = "Invalid request body",
        content_type: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if content_type:
            ctx["content_type"] = content_type
        super().__init__(message=message, context=ctx)


class PayloadTooLarge(ProvaMonitoradaError):
    """
    Raised when a request body exceeds the limit for its content type.

    The check runs against the declared Content-Length first and against
    the bytes actually received second.
    """

    def __init__(
        self,
        limit: int,
        length: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["limit"] = limit
        if length is not None:
            ctx["length"] = length
        super().__init__(message="request entity too large", context=ctx)
        self.limit = limit
        self.length = length
