"""
ProductHub Backend — Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request, plus the bearer
       guard applied per route.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route
                                                     │
                                        Depends(require_auth) on protected routes

    Request ID runs first so the access log line and every log record
    emitted while handling the request carry the same id.
"""
