# Middleware package init
"""
QuillMind Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Rate Limit] → [Logging] → [CORS] → Route Handler

    1. Request ID first, so even a rate-limited response carries X-Request-ID
    2. Rate Limit rejects abusive clients before any database work
    3. Logging records method, path, status and duration
    4. CORS is FastAPI's CORSMiddleware (handles preflight)

    Responses travel the chain in reverse.
"""
