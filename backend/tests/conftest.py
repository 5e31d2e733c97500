"""
Prova Monitorada Backend - Test Configuration (conftest.py)
============================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all
       tests. Apps are built per test through create_app() so counters and
       settings never leak between tests.

Fixture Hierarchy:
    ├── make_settings: Settings factory ignoring any local .env file
    ├── clock: Controllable time source for the rate-limit store
    ├── fake_routers: Stand-ins for the external /api routers
    ├── make_client: Builds an app and an HTTPX AsyncClient around it
    └── test_client: Client for a default development app
"""

import os
from typing import Any, AsyncGenerator, Callable, Dict, Optional

import pytest
import pytest_asyncio
from fastapi import APIRouter, Depends, HTTPException
from httpx import ASGITransport, AsyncClient

# Keep the suite quiet and independent of the developer's environment
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("NODE_ENV", None)

from prova_monitorada.config import Settings  # noqa: E402
from prova_monitorada.exceptions import ProvaMonitoradaError  # noqa: E402
from prova_monitorada.main import create_app  # noqa: E402
from prova_monitorada.middleware.body import parsed_body  # noqa: E402
from prova_monitorada.ratelimit import FixedWindowStore  # noqa: E402


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    def factory(**overrides: Any) -> Settings:
        return Settings(_env_file=None, **overrides)

    return factory


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_routers() -> Dict[str, APIRouter]:
    """
    Minimal routers mounted where the real auth / alunos / config
    handlers live. They echo the parsed body and raise on demand.
    """
    auth = APIRouter()

    @auth.post("/login")
    async def login(body: Any = Depends(parsed_body)):
        return {"received": body}

    alunos = APIRouter()

    @alunos.get("/")
    async def list_alunos():
        return [{"id": 1, "nome": "Ana"}]

    @alunos.get("/falha")
    async def falha():
        raise RuntimeError("database unavailable")

    @alunos.get("/erro-aplicacao")
    async def erro_aplicacao():
        raise ProvaMonitoradaError("falha ao carregar aluno")

    @alunos.get("/sem-detalhe")
    async def sem_detalhe():
        raise HTTPException(status_code=404)

    @alunos.get("/{aluno_id}")
    async def get_aluno(aluno_id: int):
        raise HTTPException(status_code=404, detail="Aluno não encontrado")

    config = APIRouter()

    @config.put("/")
    async def update_config(body: Any = Depends(parsed_body)):
        return {"saved": body}

    return {"auth": auth, "alunos": alunos, "config": config}


@pytest.fixture
def make_client(make_settings, clock, fake_routers):
    """
    Returns an async context manager factory:

        async with make_client(node_env="production") as client:
            ...

    Keyword arguments are Settings overrides; `client_ip` sets the peer
    address the app sees.
    """
    from contextlib import asynccontextmanager

    @asynccontextmanager
    async def factory(
        client_ip: str = "127.0.0.1",
        routers: Optional[Dict[str, APIRouter]] = None,
        **overrides: Any,
    ) -> AsyncGenerator[AsyncClient, None]:
        settings = make_settings(**overrides)
        store = FixedWindowStore(window=settings.rate_limit_window, clock=clock)
        app = create_app(
            settings=settings,
            routers=fake_routers if routers is None else routers,
            rate_limit_store=store,
        )
        transport = ASGITransport(app=app, client=(client_ip, 50000))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            client.app = app
            yield client

    return factory


@pytest_asyncio.fixture
async def test_client(make_client) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to a default development app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    async with make_client() as client:
        yield client
