"""
Mount points for the externally provided API routers.

The auth, student (alunos) and configuration handlers are not part of this
package. create_app() receives them as APIRouters keyed by mount name and
includes each one under its prefix; a mount without a router stays empty,
so its paths fall through to the 404 handler.
"""

import logging
from typing import Dict, Mapping, Optional

from fastapi import APIRouter, FastAPI

logger = logging.getLogger(__name__)

API_PREFIXES: Dict[str, str] = {
    "auth": "/api/auth",
    "alunos": "/api/alunos",
    "config": "/api/config",
}


def mount_routers(app: FastAPI, routers: Optional[Mapping[str, APIRouter]] = None) -> None:
    """
    Include each supplied router under its API prefix.

    Raises:
        KeyError: a router was supplied under an unknown mount name.
    """
    routers = dict(routers or {})
    unknown = set(routers) - set(API_PREFIXES)
    if unknown:
        raise KeyError(f"Unknown mount name(s): {sorted(unknown)}; expected one of {sorted(API_PREFIXES)}")

    for name, prefix in API_PREFIXES.items():
        router = routers.get(name)
        if router is None:
            logger.debug("No router supplied for %s; mount left empty", prefix)
            continue
        app.include_router(router, prefix=prefix)
