"""
GreenThumb Backend - Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: abusive clients are turned away before any work
    2. Request ID: correlation id for every log line of the request
    3. Logging: one access line per request, with status and duration

    Responses unwind in the reverse order, so the request id header is set
    and the access line sees the final status code.
"""
