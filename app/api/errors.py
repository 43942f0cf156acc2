import structlog
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core import exceptions as domain_exceptions

logger = structlog.get_logger(__name__)


def _http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
    # Normalize to a consistent JSON body
    return JSONResponse(
        status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers
    )


def _validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    # Keep simple, unified error message (avoid verbose FastAPI default list)
    return JSONResponse(status_code=422, content={"detail": "Unprocessable Entity"})


def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Hide internal details by default
    logger.error("unhandled_exception", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": {"code": "INTERNAL", "message": "Internal Server Error"}},
    )


def error_body(exc: domain_exceptions.DomainError, default_message: str) -> dict:
    body = {"code": exc.code, "message": str(exc) or default_message}
    body.update(exc.detail)
    return {"error": body}


def _domain_error_handler(status_code: int, default_message: str):
    def _handler(_: Request, exc: domain_exceptions.DomainError) -> JSONResponse:
        headers = None
        if isinstance(exc, domain_exceptions.RateLimitError):
            headers = {"Retry-After": str(exc.retry_after_seconds)}
        return JSONResponse(
            status_code=status_code, content=error_body(exc, default_message), headers=headers
        )

    return _handler


# Most specific first; handlers resolve along the exception MRO
_STATUS_MAP: list[tuple[type[domain_exceptions.DomainError], int, str]] = [
    (domain_exceptions.NotFoundError, 404, "Not Found"),
    (domain_exceptions.FeedQueryError, 422, "Unprocessable Entity"),
    (domain_exceptions.ValidationError, 400, "Bad Request"),
    (domain_exceptions.RateLimitError, 429, "Too Many Requests"),
    (domain_exceptions.AuthorizationError, 401, "Unauthorized"),
    (domain_exceptions.GeocoderError, 502, "Bad Gateway"),
    (domain_exceptions.InfrastructureError, 503, "Service Unavailable"),
    (domain_exceptions.DomainError, 400, "Bad Request"),
]


def install(app) -> None:
    # Register centralized exception handlers
    app.add_exception_handler(HTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    for exc_type, status_code, message in _STATUS_MAP:
        app.add_exception_handler(exc_type, _domain_error_handler(status_code, message))
    app.add_exception_handler(Exception, _unhandled_exception_handler)
