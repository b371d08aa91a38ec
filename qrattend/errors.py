from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Stable codes returned to callers in every error body."""

    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    FORBIDDEN = "forbidden"
    LOCATION_REQUIRED = "location_required"
    TOO_FAR = "too_far"
    ALREADY_MARKED = "already_marked"
    VALIDATION_FAILURE = "validation_failure"
    ROLE_DENIED = "role_denied"
    NOT_AUTHENTICATED = "not_authenticated"
    INTERNAL_ERROR = "internal_error"


HTTP_STATUS = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.EXPIRED: 410,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.LOCATION_REQUIRED: 428,
    ErrorCode.TOO_FAR: 422,
    ErrorCode.ALREADY_MARKED: 409,
    ErrorCode.VALIDATION_FAILURE: 400,
    ErrorCode.ROLE_DENIED: 403,
    ErrorCode.NOT_AUTHENTICATED: 401,
    ErrorCode.INTERNAL_ERROR: 500,
}


class DomainError(Exception):
    """Base exception for business rule violations outside the claim pipeline."""

    code = ErrorCode.INTERNAL_ERROR

    def __init__(self, detail: str, **extra):
        super().__init__(detail)
        self.detail = detail
        self.extra = extra

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.code]


class NotFoundError(DomainError):
    """Raised when a session, class or user does not resolve."""

    code = ErrorCode.NOT_FOUND


class ForbiddenError(DomainError):
    """Raised when the caller does not own or belong to the target resource."""

    code = ErrorCode.FORBIDDEN


class ValidationFailure(DomainError):
    """Raised when input data is malformed."""

    code = ErrorCode.VALIDATION_FAILURE


class RoleDeniedError(DomainError):
    code = ErrorCode.ROLE_DENIED


class NotAuthenticatedError(DomainError):
    code = ErrorCode.NOT_AUTHENTICATED
