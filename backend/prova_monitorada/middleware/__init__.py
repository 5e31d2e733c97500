# Middleware package init
"""
Prova Monitorada Backend - Middleware Package
==============================================

What:  The ordered stages every request passes through before routing.

Middleware Chain (order matters!):
    Request → [Errors] → [CORS] → [Errors] → [Body] → [Rate Limit] → [Logging] → Routes

    1. Errors FIRST: turns any exception from the stages below into a 500
    2. CORS: rejects disallowed origins, answers preflights, adds CORS
       headers to every response of an admitted origin
    2b. Errors again: the same 500 handler, inside CORS so those 500s get
       the CORS headers too
    3. Body: decodes JSON / urlencoded bodies, enforces size limits
    4. Rate Limit: counts every request that got this far
    5. Logging: records method and path of admitted requests

Starlette runs the last-added middleware first, so create_app() adds them
in the reverse of this order.
"""
