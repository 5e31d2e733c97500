# Routes package init
"""
Prova Monitorada Backend - API Routes Package
==============================================

Route Inventory:
    - health.py:  GET  /health          (liveness check)
    - root.py:    GET  /                (discovery document)
    - mounts.py:  *    /api/auth/*      (external auth router)
                  *    /api/alunos/*    (external student router)
                  *    /api/config/*    (external configuration router)

The /api routers are supplied to create_app(); this package only knows
their prefixes.
"""
