# Middleware package init
"""
Notekeeper Backend: Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: Generate correlation ID for logging and tracing
    2. Logging: Log request details with the generated request ID
    3. CORS: Applied by FastAPI's CORSMiddleware (handles preflight)

    Responses travel the chain in reverse, so the request ID header is set
    and the access line (status, duration) is logged on the way out.
"""
