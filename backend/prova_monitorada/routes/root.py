"""
GET (and HEAD) / - discovery document listing the API entry points.
"""

from fastapi import APIRouter

from prova_monitorada import __version__
from prova_monitorada.routes.mounts import API_PREFIXES
from prova_monitorada.schemas import DiscoveryResponse

router = APIRouter(tags=["Discovery"])


@router.api_route(
    "/",
    methods=["GET", "HEAD"],
    response_model=DiscoveryResponse,
    summary="API discovery document",
)
async def root() -> DiscoveryResponse:
    return DiscoveryResponse(
        message="Bem-vindo à API de Provas Monitoradas",
        version=__version__,
        endpoints={**API_PREFIXES, "health": "/health"},
        documentation="Consulte a documentação para mais informações",
    )
