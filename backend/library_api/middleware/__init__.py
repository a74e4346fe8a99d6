"""
Library Store Backend - Middleware Package
===========================================

Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID, echoed in the X-Request-ID response header
    2. Logging: one access line per request, tagged with the request ID
"""
