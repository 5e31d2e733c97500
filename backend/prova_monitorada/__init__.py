"""
Prova Monitorada Backend - Application Package
===============================================

HTTP entrypoint for the monitored-exam ("prova monitorada") platform.

    ┌─────────────────────────────────────┐
    │   Middleware (ingress pipeline)     │  ← CORS, body, rate limit, logging
    ├─────────────────────────────────────┤
    │   Routes                            │  ← /health, /, mounted /api routers
    ├─────────────────────────────────────┤
    │   Fallbacks                         │  ← 404 payload, 500 payload
    └─────────────────────────────────────┘

The /api/auth, /api/alunos and /api/config handlers are provided by the
caller of create_app(); see routes/mounts.py.
"""

__version__ = "1.0.0"
