from __future__ import annotations

import time
import uuid
from collections.abc import Callable

import sentry_sdk
import structlog
from fastapi import Request, Response

from app.middleware.rate_limit import client_ip

REQUEST_ID_HEADER = "X-Request-ID"
_MAX_REQUEST_ID_LENGTH = 128

logger = structlog.get_logger(__name__)


def _request_id(request: Request) -> str:
    inbound = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
    if inbound and len(inbound) <= _MAX_REQUEST_ID_LENGTH:
        return inbound
    return str(uuid.uuid4())


def _access_log(request: Request, rid: str, status: int, start_ns: int, *, failed: bool) -> None:
    duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000.0
    # Query strings are left out: feed requests carry coordinates
    fields = dict(
        request_id=rid,
        path=request.url.path,
        method=request.method,
        status=status,
        duration_ms=round(duration_ms, 3),
        client_ip=client_ip(request),
    )
    if failed:
        logger.error("http_request", exc_info=True, **fields)
    else:
        logger.info("http_request", **fields)


async def request_id_middleware(request: Request, call_next: Callable) -> Response:
    """Attach/propagate Request-ID and emit structured access log.

    - Prefer inbound X-Request-ID; generate UUID4 if absent or oversized
    - Bind request_id, path, method to contextvars so service logs include it
    - Emit one-line access log event="http_request"
    - Always set X-Request-ID on the response
    """
    rid = _request_id(request)
    structlog.contextvars.bind_contextvars(
        request_id=rid, path=request.url.path, method=request.method
    )
    sentry_sdk.set_tag("request_id", rid)
    sentry_sdk.set_tag("path", request.url.path)

    start_ns = time.perf_counter_ns()
    try:
        response = await call_next(request)
    except Exception:
        _access_log(request, rid, 500, start_ns, failed=True)
        structlog.contextvars.clear_contextvars()
        raise

    _access_log(request, rid, response.status_code, start_ns, failed=False)
    response.headers[REQUEST_ID_HEADER] = rid
    # Clear per-request bindings to avoid leakage across tasks
    structlog.contextvars.clear_contextvars()
    return response
