"""Domain-level exception hierarchy for service and repository layers.

Every error carries a stable machine-readable ``code`` next to its display message,
so callers never have to match on human text.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for domain-specific failures."""

    code = "DOMAIN_ERROR"

    def __init__(
        self, message: str = "", *, code: str | None = None, detail: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.detail: dict[str, Any] = detail or {}


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    code = "NOT_FOUND"


class ValidationError(DomainError):
    """Raised when input validation fails at the domain/service layer."""

    code = "VALIDATION_ERROR"


class AdmissionError(ValidationError):
    """Submitted text was refused by the admission filter.

    ``code`` is one of ``EMPTY_TEXT``, ``TEXT_TOO_LONG`` or ``CONTENT_BLOCKED``.
    """


class FeedQueryError(ValidationError):
    """Feed request is malformed (missing coordinates, broken cursor)."""


class RateLimitError(DomainError):
    """Actor posted again inside the cooldown window."""

    code = "RATE_LIMIT"

    def __init__(self, message: str, *, retry_after_seconds: int) -> None:
        super().__init__(message, detail={"retry_after_seconds": retry_after_seconds})
        self.retry_after_seconds = retry_after_seconds


class AuthorizationError(DomainError):
    """Raised when a privileged operation is called without valid credentials."""

    code = "UNAUTHORIZED"


class InfrastructureError(DomainError):
    """Raised when infrastructure (DB or external service) is unavailable."""

    code = "SERVICE_UNAVAILABLE"


class GeocoderError(InfrastructureError):
    """External geocoder failed (transport error, bad status, malformed payload)."""

    code = "GEOCODER_UNAVAILABLE"


class ConfigurationError(InfrastructureError):
    """A required setting is missing; the affected path fails closed."""

    code = "NOT_CONFIGURED"
