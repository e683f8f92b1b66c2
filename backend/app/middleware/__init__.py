# Middleware package init
"""
ScanPlant Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (request direction):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    1. Rate Limit: rejects over-quota callers before any database work
    2. Request ID: correlation ID for logs, error bodies and the response header
    3. Logging: one access line per request with status, duration and caller

Caller key:
    Rate limiting and access logs identify the caller by the X-User-Id
    header forwarded by the authentication gateway, falling back to the
    client IP for anonymous requests.
"""

from starlette.requests import Request


def caller_key(request: Request) -> str:
    user_id = (request.headers.get("X-User-Id") or "").strip()
    if user_id:
        return f"user:{user_id}"
    client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
    return f"ip:{client_ip}"
