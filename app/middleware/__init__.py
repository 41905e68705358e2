# Middleware package init
"""
TechNotes Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Rate Limit] → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Rate Limit first: reject abusive requests before any processing
    2. Request ID: correlation ID for logging and error handlers
    3. Logging: one access line per request, tagged with the request ID
    4. CORS: FastAPI's CORSMiddleware (handles preflight)
"""
