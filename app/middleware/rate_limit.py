from __future__ import annotations

import math
import os
import time
from collections.abc import Callable
from typing import TypedDict

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from limits import parse as parse_limit
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter
from slowapi import Limiter


class RateLimitInfo(TypedDict, total=False):
    method: str
    ip: str
    limit: str


# Coarse per-IP throttle in front of every route. This is independent of the
# per-actor posting cooldown, which lives in the confession service.
_METHOD_LIMITS: dict[str, str] = {
    "GET": "60/minute",
    "HEAD": "60/minute",
    "POST": "30/minute",
    "PATCH": "30/minute",
    "DELETE": "30/minute",
}
# Probes must stay reachable for orchestrators
_EXEMPT_PATHS = frozenset({"/healthz", "/readyz", "/health"})

# Geocoder lookups proxy a third-party service with its own usage policy
GEOCODE_LIMIT = "20/minute"

_storage = MemoryStorage()
_rate = MovingWindowRateLimiter(_storage)


def client_ip(request: Request) -> str:
    # Prefer X-Forwarded-For if present (first hop), fall back to ASGI client
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "local"


def enabled() -> bool:
    # Enable by default unless TESTING is set.
    # Allow overriding with RATE_LIMIT_ENABLED=1 even when TESTING.
    if os.getenv("RATE_LIMIT_ENABLED") in {"1", "true", "TRUE"}:
        return True
    if os.getenv("TESTING"):
        return False
    return True


# Route-level limits (decorators) go through slowapi, keyed by the same client IP
limiter = Limiter(key_func=client_ip, enabled=enabled())


def reset_storage() -> None:
    _storage.reset()
    limiter.reset()


def rate_limited_response(info: RateLimitInfo, retry_after: int | None = None) -> JSONResponse:
    headers = {"Retry-After": str(retry_after)} if retry_after else None
    return JSONResponse(
        status_code=429,
        content={
            "error": {
                "code": "RATE_LIMITED",
                "message": "Too Many Requests",
                "detail": info,
            }
        },
        headers=headers,
    )


async def rate_limit_middleware(request: Request, call_next: Callable) -> Response:
    if not enabled() or request.url.path in _EXEMPT_PATHS:
        return await call_next(request)

    method = request.method.upper()
    limit_str = _METHOD_LIMITS.get(method)
    if not limit_str:
        # OPTIONS (CORS preflight) and others are not throttled
        return await call_next(request)

    ip = client_ip(request)
    key = f"ip:{ip}|m:{method}"
    limit = parse_limit(limit_str)

    if not _rate.hit(limit, key):
        info: RateLimitInfo = {"method": method, "ip": ip, "limit": limit_str}
        request.state.rate_limit_info = info
        reset_at, _remaining = _rate.get_window_stats(limit, key)
        retry_after = max(1, math.ceil(reset_at - time.time()))
        return rate_limited_response(info, retry_after)

    response = await call_next(request)
    response.headers.setdefault("X-RateLimit-Limit", limit_str)
    return response
