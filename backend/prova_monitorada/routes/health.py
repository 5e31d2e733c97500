"""
Prova Monitorada Backend - Health Check Route
==============================================

What:  GET (and HEAD) /health for load balancers and uptime monitors.
How:   Returns a fixed-shape payload with the current time and environment.
       No database or downstream checks: HTTP 200 means the process is up
       and serving requests.

Note that /health is rate-limited like every other path; monitors polling
more often than 100 times per 15 minutes from one IP will see 429s.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from prova_monitorada.middleware.logging import iso_timestamp
from prova_monitorada.schemas import HealthResponse

SERVICE_NAME = "Prova Monitorada Backend"

router = APIRouter(tags=["Health"])


@router.api_route(
    "/health",
    methods=["GET", "HEAD"],
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    settings = request.app.state.settings
    return HealthResponse(
        status="OK",
        timestamp=iso_timestamp(datetime.now(timezone.utc)),
        environment=settings.node_env,
        service=SERVICE_NAME,
    )
