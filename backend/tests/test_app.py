"""
Prova Monitorada Backend - Application Endpoint Tests
======================================================

What:  End-to-end tests of the assembled pipeline through HTTP.
How:   HTTPX AsyncClient over ASGITransport (no server process), apps built
       per test by the make_client fixture.

What we test:
    ✅ GET /health shape and timestamp format, HEAD /health
    ✅ GET / discovery document, HEAD /
    ✅ 404 payload for unknown paths and wrong methods
    ✅ Router HTTPExceptions (custom or default detail) kept as raised
    ✅ Dispatch to injected routers (and empty mounts)
    ✅ 500 payload for router errors, verbose vs production
    ✅ Request logging
    ✅ Startup log lines
"""

import logging
import re
from unittest.mock import patch

import pytest
from fastapi import FastAPI

from prova_monitorada.main import create_app, lifespan
from prova_monitorada.routes.mounts import mount_routers

ISO_MILLIS = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_ok(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["service"] == "Prova Monitorada Backend"
        assert body["environment"] == "development"
        assert ISO_MILLIS.match(body["timestamp"])

    @pytest.mark.asyncio
    async def test_health_reports_environment(self, make_client):
        async with make_client(node_env="staging") as client:
            response = await client.get("/health")

        assert response.json()["environment"] == "staging"

    @pytest.mark.asyncio
    async def test_health_head(self, test_client):
        response = await test_client.head("/health")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"


class TestRoot:

    @pytest.mark.asyncio
    async def test_discovery_document(self, test_client):
        response = await test_client.get("/")

        assert response.status_code == 200
        assert '"auth":"/api/auth"' in response.text
        assert response.json() == {
            "message": "Bem-vindo à API de Provas Monitoradas",
            "version": "1.0.0",
            "endpoints": {
                "auth": "/api/auth",
                "alunos": "/api/alunos",
                "config": "/api/config",
                "health": "/health",
            },
            "documentation": "Consulte a documentação para mais informações",
        }

    @pytest.mark.asyncio
    async def test_discovery_head(self, test_client):
        response = await test_client.head("/")

        assert response.status_code == 200


class TestNotFound:

    @pytest.mark.asyncio
    async def test_unknown_api_path(self, test_client):
        response = await test_client.get("/api/nonexistent")

        assert response.status_code == 404
        assert response.json() == {
            "error": "Endpoint não encontrado",
            "path": "/api/nonexistent",
        }

    @pytest.mark.asyncio
    async def test_path_keeps_query_string(self, test_client):
        response = await test_client.get("/nada?pagina=2")

        assert response.status_code == 404
        assert response.json()["path"] == "/nada?pagina=2"

    @pytest.mark.asyncio
    async def test_wrong_method_is_not_found(self, test_client):
        response = await test_client.post("/health")

        assert response.status_code == 404
        assert response.json()["path"] == "/health"

    @pytest.mark.asyncio
    async def test_unknown_path_under_mounted_router(self, test_client):
        response = await test_client.get("/api/auth/desconhecido")

        assert response.status_code == 404
        assert response.json()["error"] == "Endpoint não encontrado"

    @pytest.mark.asyncio
    async def test_router_http_exception_kept(self, test_client):
        """A 404 raised by a router on purpose keeps its own detail."""
        response = await test_client.get("/api/alunos/42")

        assert response.status_code == 404
        assert response.json() == {"detail": "Aluno não encontrado"}

    @pytest.mark.asyncio
    async def test_router_bare_404_kept(self, test_client):
        """A router 404 with the default detail is still the router's answer."""
        response = await test_client.get("/api/alunos/sem-detalhe")

        assert response.status_code == 404
        assert response.json() == {"detail": "Not Found"}

    @pytest.mark.asyncio
    async def test_docs_are_not_exposed(self, test_client):
        for path in ("/docs", "/openapi.json"):
            response = await test_client.get(path)
            assert response.status_code == 404


class TestDispatch:

    @pytest.mark.asyncio
    async def test_routes_to_alunos_router(self, test_client):
        response = await test_client.get("/api/alunos/")

        assert response.status_code == 200
        assert response.json() == [{"id": 1, "nome": "Ana"}]

    @pytest.mark.asyncio
    async def test_router_sees_parsed_json(self, test_client):
        response = await test_client.post(
            "/api/auth/login", json={"email": "prof@escola.br", "senha": "x"}
        )

        assert response.status_code == 200
        assert response.json() == {"received": {"email": "prof@escola.br", "senha": "x"}}

    @pytest.mark.asyncio
    async def test_empty_mounts_fall_through(self, make_client):
        async with make_client(routers={}) as client:
            response = await client.get("/api/alunos/")

        assert response.status_code == 404

    def test_unknown_mount_name_rejected(self):
        with pytest.raises(KeyError, match="provas"):
            mount_routers(FastAPI(), {"provas": object()})


class TestErrorHandler:

    @pytest.mark.asyncio
    async def test_router_error_message_in_development(self, test_client):
        response = await test_client.get("/api/alunos/falha")

        assert response.status_code == 500
        assert response.json() == {
            "error": "Erro interno do servidor",
            "message": "database unavailable",
        }

    @pytest.mark.asyncio
    async def test_router_error_hidden_in_production(self, make_client):
        async with make_client(node_env="production") as client:
            response = await client.get("/api/alunos/falha")

        assert response.status_code == 500
        assert response.json()["message"] == "Internal server error"

    @pytest.mark.asyncio
    async def test_application_error(self, test_client):
        response = await test_client.get("/api/alunos/erro-aplicacao")

        assert response.status_code == 500
        assert response.json()["message"] == "falha ao carregar aluno"

    @pytest.mark.asyncio
    async def test_application_error_hidden_in_production(self, make_client):
        async with make_client(node_env="production") as client:
            response = await client.get("/api/alunos/erro-aplicacao")

        assert response.json()["message"] == "Internal server error"

    @pytest.mark.asyncio
    async def test_error_is_logged(self, test_client, caplog):
        with caplog.at_level(logging.ERROR, logger="prova_monitorada.middleware.errors"):
            await test_client.get("/api/alunos/falha")

        assert "Error: database unavailable" in caplog.text


class TestRequestLogging:

    @pytest.mark.asyncio
    async def test_logs_method_and_path(self, test_client, caplog):
        with caplog.at_level(logging.INFO, logger="prova_monitorada.access"):
            await test_client.get("/api/nonexistent?x=1")

        messages = [r.getMessage() for r in caplog.records if r.name == "prova_monitorada.access"]
        assert len(messages) == 1
        timestamp, request_line = messages[0].split(" - ", 1)
        assert ISO_MILLIS.match(timestamp)
        assert request_line == "GET /api/nonexistent"

    @pytest.mark.asyncio
    async def test_rate_limited_requests_not_logged(self, make_client, caplog):
        async with make_client(rate_limit_max=1) as client:
            with caplog.at_level(logging.INFO, logger="prova_monitorada.access"):
                await client.get("/health")
                await client.get("/health")

        access = [r for r in caplog.records if r.name == "prova_monitorada.access"]
        assert len(access) == 1


class TestLifespan:

    @pytest.mark.asyncio
    async def test_startup_lines(self, make_settings, caplog):
        app = create_app(settings=make_settings(port=4321, node_env="production"))

        with patch("prova_monitorada.main.setup_logging"), \
             caplog.at_level(logging.INFO, logger="prova_monitorada.main"):
            async with lifespan(app):
                pass

        text = caplog.text
        assert "Servidor rodando na porta 4321" in text
        assert "Ambiente: production" in text
        assert "Health check: http://localhost:4321/health" in text
