"""
Prova Monitorada Backend - FastAPI Application Factory
=======================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance;
       run() serves the module-level `app` with uvicorn.
Who:   uvicorn (`uvicorn prova_monitorada.main:app`), the
       `prova-monitorada` console script, and the test suite.

Application Architecture:
    ┌───────────────────────────────────────────────────────────────┐
    │                         FastAPI App                           │
    │                                                               │
    │  Middleware Chain:                                            │
    │  ┌────────┐ ┌──────┐ ┌────────┐ ┌──────┐ ┌──────┐ ┌─────────┐ │
    │  │ Errors │→│ CORS │→│ Errors │→│ Body │→│ Rate │→│ Logging │ │
    │  └────────┘ └──────┘ └────────┘ └──────┘ └──────┘ └─────────┘ │
    │                                                               │
    │  Routes:                                                      │
    │  ┌────────────────┐ ┌────────────┐ ┌───────────────────────┐  │
    │  │GET/HEAD /health│ │ GET/HEAD / │ │ /api/auth /api/alunos │  │
    │  └────────────────┘ └────────────┘ │ /api/config (injected)│  │
    │                                    └───────────────────────┘  │
    │  Fallbacks:                                                   │
    │  ┌────────────────────────────────────────────────────────┐   │
    │  │ unmatched route → 404 │ any exception → 500            │   │
    │  └────────────────────────────────────────────────────────┘   │
    └───────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Log port, environment and health-check URL
    Shutdown:
    1. Log shutdown
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Mapping, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from prova_monitorada import __version__
from prova_monitorada.config import Settings, settings as default_settings
from prova_monitorada.cors import OriginPolicy
from prova_monitorada.exceptions import ProvaMonitoradaError
from prova_monitorada.middleware.body import BodyParsingMiddleware
from prova_monitorada.middleware.cors import OriginPolicyCORSMiddleware
from prova_monitorada.middleware.errors import ErrorHandlingMiddleware, internal_error_response
from prova_monitorada.middleware.logging import RequestLoggingMiddleware
from prova_monitorada.middleware.rate_limit import RateLimitMiddleware
from prova_monitorada.ratelimit import FixedWindowStore
from prova_monitorada.routes import health, root
from prova_monitorada.routes.mounts import mount_routers
from prova_monitorada.schemas import NotFoundResponse

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (captured by the container runtime)
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # The access log middleware already records every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings)
    logger.info("🚀 Servidor rodando na porta %d", settings.port)
    logger.info("🌐 Ambiente: %s", settings.node_env)
    logger.info("📊 Health check: http://localhost:%d/health", settings.port)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Prova Monitorada Backend shutting down...")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def original_url(request: Request) -> str:
    """The request target as sent by the client: raw path plus query string."""
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path
    query = request.url.query
    return f"{path}?{query}" if query else path


def is_routing_miss(request: Request, exc: StarletteHTTPException) -> bool:
    """
    True for the 404/405 the router raises when no route matches.

    The router copies the matched route into the scope before calling it, so
    a 404 with no endpoint in scope is a miss, and a 405 is a miss when the
    matched route does not accept the request method. HTTPExceptions raised
    by an endpoint itself are never misses.
    """
    if exc.status_code == 404:
        return "endpoint" not in request.scope
    if exc.status_code == 405:
        methods = getattr(request.scope.get("route"), "methods", None)
        return methods is None or request.method not in methods
    return False


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register handlers for errors raised while routing.

    Handler hierarchy:
        No matching route       → 404 {"error": "Endpoint não encontrado", "path"}
        (method mismatch too)
        ProvaMonitoradaError    → 500 {"error", "message"}
        other HTTPException     → FastAPI default (status and detail kept)

    Every other exception propagates to the inner ErrorHandlingMiddleware,
    which builds the same 500 body as the ProvaMonitoradaError handler.
    """

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if is_routing_miss(request, exc):
            payload = NotFoundResponse(error="Endpoint não encontrado", path=original_url(request))
            return JSONResponse(status_code=404, content=payload.model_dump())
        return await http_exception_handler(request, exc)

    @app.exception_handler(ProvaMonitoradaError)
    async def handle_application_error(request: Request, exc: ProvaMonitoradaError):
        return internal_error_response(exc, request.app.state.settings.is_production)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    routers: Optional[Mapping[str, APIRouter]] = None,
    rate_limit_store: Optional[FixedWindowStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings:          Configuration; the process-wide Settings when None.
        routers:           APIRouters keyed by mount name ("auth", "alunos",
                           "config"); missing mounts stay empty.
        rate_limit_store:  Counter store for the rate limiter; a fresh
                           FixedWindowStore sized from settings when None.

    Returns: Fully configured FastAPI instance. The settings and the store
    are exposed as app.state.settings and app.state.rate_limit_store.
    """
    if settings is None:
        settings = default_settings
    store = rate_limit_store
    if store is None:
        store = FixedWindowStore(window=settings.rate_limit_window)

    app = FastAPI(
        title="Prova Monitorada API",
        version=__version__,
        # The public surface is exactly the routes below; no docs endpoints
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.rate_limit_store = store

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition. Adding
    # Logging → RateLimit → Body → Errors → CORS → Errors makes the execution
    # order Errors → CORS → Errors → Body → RateLimit → Logging.
    # The inner error layer builds 500s for admitted requests inside CORS, so
    # they still get the CORS headers; the outer one answers CORS rejections.
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        store=store,
        max_requests=settings.rate_limit_max,
        message=settings.rate_limit_message,
    )
    app.add_middleware(
        BodyParsingMiddleware,
        json_limit=settings.json_body_limit,
        urlencoded_limit=settings.urlencoded_body_limit,
    )
    app.add_middleware(ErrorHandlingMiddleware, production=settings.is_production)
    app.add_middleware(OriginPolicyCORSMiddleware, policy=OriginPolicy.from_settings(settings))
    app.add_middleware(ErrorHandlingMiddleware, production=settings.is_production)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    mount_routers(app, routers)
    app.include_router(health.router)
    app.include_router(root.router)

    return app


def run() -> None:
    """Serve the application with uvicorn on HOST:PORT."""
    import uvicorn

    uvicorn.run(app, host=default_settings.host, port=default_settings.port)


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `prova_monitorada.main:app` to be importable
app = create_app()


if __name__ == "__main__":
    run()
