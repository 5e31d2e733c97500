"""
Prova Monitorada Backend - Pydantic Response Schemas
=====================================================

What:  Response models for the endpoints the entrypoint owns itself
       (health, discovery, not-found, error, rate limit).
How:   FastAPI validates and serializes route return values through these
       models; the middleware and exception handlers build their JSON bodies
       from them. Field names are part of the public contract the frontend
       reads; do not rename them.
"""

from typing import Dict

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """
    What:  Liveness payload of GET /health.
    Who:   Load balancers, uptime monitors, smoke tests.

    No dependency checks: a 200 only means the process is serving requests.
    """
    status: str = Field(description='Always "OK"')
    timestamp: str = Field(description="Server time, UTC ISO 8601 with milliseconds")
    environment: str = Field(description="Value of NODE_ENV (development when unset)")
    service: str = Field(description="Service name")


class DiscoveryResponse(BaseModel):
    """Static document returned by GET / listing the endpoint prefixes."""
    message: str
    version: str
    endpoints: Dict[str, str] = Field(description="Endpoint name → path prefix")
    documentation: str


class NotFoundResponse(BaseModel):
    error: str = Field(description='Always "Endpoint não encontrado"')
    path: str = Field(description="Requested path, including the query string if any")


class ErrorResponse(BaseModel):
    """
    Body of every HTTP 500.

    Example:
        {"error": "Erro interno do servidor", "message": "Not allowed by CORS"}
    """
    error: str
    message: str = Field(description='Error detail, or "Internal server error" in production')


class RateLimitResponse(BaseModel):
    error: str = Field(description="Fixed rate-limit message")
