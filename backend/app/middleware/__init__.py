"""
WellNest Backend — Middleware Package
======================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: assigns or propagates X-Request-ID before anything logs
    2. Logging: records method, path, status and duration with that ID
    3. GZip / CORS: applied by Starlette's stock middleware
"""
