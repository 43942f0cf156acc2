from __future__ import annotations

from collections.abc import Callable

from fastapi import Request, Response

_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "no-referrer",
    "Permissions-Policy": "geolocation=(self)",
    # API responses are per-request; never let shared caches keep feed pages
    "Cache-Control": "no-store",
}


async def security_headers_middleware(request: Request, call_next: Callable) -> Response:
    """Attach basic security headers to every response (existing values win)."""
    response = await call_next(request)
    for name, value in _HEADERS.items():
        response.headers.setdefault(name, value)
    return response
